# billing/api/views/ledgers.py

"""
PATH: billing/api/views/ledgers.py

STUDENT LEDGER API

GET  /api/billing/ledgers/?student_id=S-1       list a student's ledgers
POST /api/billing/ledgers/current/               get-or-create the current-year ledger
GET  /api/billing/ledgers/<id>/                  ledger with charges and payments
POST /api/billing/ledgers/<id>/charges/          extra charge (late fee, adjustment)
POST /api/billing/ledgers/<id>/discounts/        configured or ad-hoc discount
POST /api/billing/ledgers/<id>/payments/         payment against this ledger only

Security:
- Authenticated
- Django model permissions via has_perm (groups honored, no role hardcoding)
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from billing.api.errors import service_error_response
from billing.api.serializers import (
    AddChargeSerializer,
    AddPaymentSerializer,
    ApplyDiscountSerializer,
    CurrentLedgerSerializer,
    LedgerChargeSerializer,
    LedgerPaymentSerializer,
    StudentLedgerDetailSerializer,
    StudentLedgerSerializer,
)
from billing.services import ledger_service
from billing.services.exceptions import BillingServiceError
from billing.services.payment_service import pay_ledger

LEDGER_VIEW_PERMISSION = "billing.view_studentledger"
LEDGER_CREATE_PERMISSION = "billing.add_studentledger"
CHARGE_PERMISSION = "billing.add_ledgercharge"
PAYMENT_PERMISSION = "billing.add_ledgerpayment"


def _forbidden(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_403_FORBIDDEN)


class StudentLedgerListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StudentLedgerSerializer

    @extend_schema(
        tags=["billing"],
        parameters=[
            OpenApiParameter(
                name="student_id",
                type=str,
                required=True,
                description="Student identifier (e.g. S-2024-0001).",
            ),
        ],
        responses=StudentLedgerSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(LEDGER_VIEW_PERMISSION):
            return _forbidden("You do not have permission to view student ledgers.")

        student_id = (request.query_params.get("student_id") or "").strip()
        if not student_id:
            return Response(
                {"detail": "student_id query parameter is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        qs = ledger_service.list_ledgers_for_student(student_id)
        return Response(StudentLedgerSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class CurrentLedgerView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CurrentLedgerSerializer

    @extend_schema(
        tags=["billing"],
        request=CurrentLedgerSerializer,
        responses={200: StudentLedgerDetailSerializer, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(LEDGER_CREATE_PERMISSION):
            return _forbidden("You do not have permission to open student ledgers.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            ledger = ledger_service.get_or_create_for_current_year(
                data["student_id"],
                grade_level=data.get("grade_level"),
            )
        except BillingServiceError as exc:
            return service_error_response(exc)

        return Response(StudentLedgerDetailSerializer(ledger).data, status=status.HTTP_200_OK)


class StudentLedgerDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StudentLedgerDetailSerializer

    @extend_schema(tags=["billing"], responses={200: StudentLedgerDetailSerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(LEDGER_VIEW_PERMISSION):
            return _forbidden("You do not have permission to view student ledgers.")

        try:
            ledger = ledger_service.get_ledger(pk)
        except BillingServiceError as exc:
            return service_error_response(exc)

        return Response(StudentLedgerDetailSerializer(ledger).data, status=status.HTTP_200_OK)


class LedgerChargeCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AddChargeSerializer

    @extend_schema(
        tags=["billing"],
        request=AddChargeSerializer,
        responses={201: LedgerChargeSerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHARGE_PERMISSION):
            return _forbidden("You do not have permission to add ledger charges.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            charge = ledger_service.add_charge(
                pk,
                charge_type=data["charge_type"],
                amount=data["amount"],
                description=data.get("description"),
            )
        except BillingServiceError as exc:
            return service_error_response(exc)

        return Response(LedgerChargeSerializer(charge).data, status=status.HTTP_201_CREATED)


class LedgerDiscountCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ApplyDiscountSerializer

    @extend_schema(
        tags=["billing"],
        request=ApplyDiscountSerializer,
        responses={201: LedgerChargeSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHARGE_PERMISSION):
            return _forbidden("You do not have permission to apply discounts.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            if data.get("discount_id") is not None and data.get("amount") is None:
                charge = ledger_service.apply_configured_discount(
                    pk,
                    discount_id=data["discount_id"],
                    base_amount=data.get("base_amount"),
                )
            else:
                charge = ledger_service.apply_discount(
                    pk,
                    discount_type=data.get("discount_type") or "Manual",
                    amount=data["amount"],
                    discount_id=data.get("discount_id"),
                    description=data.get("description"),
                )
        except BillingServiceError as exc:
            return service_error_response(exc)

        return Response(LedgerChargeSerializer(charge).data, status=status.HTTP_201_CREATED)


class LedgerPaymentCreateView(GenericAPIView):
    """
    Records a payment against one specific ledger. Unlike the cashier
    endpoint, the amount is not capped: overpayment is rejected (409).
    The receipt is mirrored in the legacy log and posted to the journal
    (Dr Cash / Cr Tuition Revenue); a posting failure does not undo it.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = AddPaymentSerializer

    @extend_schema(
        tags=["billing"],
        request=AddPaymentSerializer,
        responses={201: LedgerPaymentSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_PERMISSION):
            return _forbidden("You do not have permission to record payments.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = pay_ledger(
                pk,
                amount=data["amount"],
                or_number=data["or_number"],
                payment_method=data["payment_method"],
                processed_by=request.user.pk,
            )
        except BillingServiceError as exc:
            return service_error_response(exc)

        return Response(
            LedgerPaymentSerializer(result.payment).data, status=status.HTTP_201_CREATED
        )
