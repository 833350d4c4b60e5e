# billing/api/views/payments.py

"""
PATH: billing/api/views/payments.py

CASHIER PAYMENT API

POST /api/billing/payments/
    - Requires permission: billing.add_ledgerpayment
    - Applies the payment to the most recent prior-year ledger that still
      has a balance, else the current-year ledger; caps it at that balance,
      logs the receipt and posts Dr Cash / Cr Tuition Revenue

GET /api/billing/aging/
    - Requires permission: billing.view_studentledger
    - Ledgers with an outstanding balance, newest school year first

GET  /api/billing/legacy-payments/?student_id=S-1
POST /api/billing/legacy-payments/
    - Receipts kept outside the ledgers (older records, imports)
    - Viewing requires billing.view_legacypayment, recording billing.add_legacypayment
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from billing.api.errors import service_error_response
from billing.api.serializers import (
    LedgerPaymentSerializer,
    LegacyPaymentSerializer,
    ProcessPaymentSerializer,
    RecordLegacyPaymentSerializer,
    StudentLedgerSerializer,
)
from billing.models.legacy_payment import LegacyPayment
from billing.services import ledger_service
from billing.services.exceptions import BillingServiceError
from billing.services.payment_service import process_payment, record_legacy_payment

logger = logging.getLogger("payments")

PAYMENT_PERMISSION = "billing.add_ledgerpayment"
AGING_PERMISSION = "billing.view_studentledger"
LEGACY_VIEW_PERMISSION = "billing.view_legacypayment"
LEGACY_CREATE_PERMISSION = "billing.add_legacypayment"


class ProcessPaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ProcessPaymentSerializer

    @extend_schema(
        tags=["billing"],
        request=ProcessPaymentSerializer,
        responses={201: dict, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_PERMISSION):
            return Response(
                {"detail": "You do not have permission to record payments."},
                status=status.HTTP_403_FORBIDDEN,
            )

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = process_payment(
                student_id=data["student_id"],
                amount=data["amount"],
                or_number=data["or_number"],
                payment_method=data["payment_method"],
                processed_by=request.user.pk,
            )
        except BillingServiceError as exc:
            logger.info(
                "Payment rejected",
                extra={"or_number": data["or_number"], "reason": str(exc)},
            )
            return service_error_response(exc)

        je = result.journal_entry
        return Response(
            {
                "ledger": StudentLedgerSerializer(result.ledger).data,
                "payment": LedgerPaymentSerializer(result.payment).data,
                "applied_amount": str(result.applied_amount),
                "unapplied_amount": str(result.unapplied_amount),
                "journal_entry": (
                    {"id": je.pk, "entry_number": je.entry_number, "status": je.status}
                    if je is not None
                    else None
                ),
            },
            status=status.HTTP_201_CREATED,
        )


class AgingReportView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StudentLedgerSerializer

    @extend_schema(tags=["billing"], responses=StudentLedgerSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(AGING_PERMISSION):
            return Response(
                {"detail": "You do not have permission to view the aging report."},
                status=status.HTTP_403_FORBIDDEN,
            )

        qs = ledger_service.aging_report()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StudentLedgerSerializer(page, many=True).data)
        return Response(StudentLedgerSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class LegacyPaymentListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = RecordLegacyPaymentSerializer

    @extend_schema(tags=["billing"], responses=LegacyPaymentSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(LEGACY_VIEW_PERMISSION):
            return Response(
                {"detail": "You do not have permission to view legacy payments."},
                status=status.HTTP_403_FORBIDDEN,
            )

        qs = LegacyPayment.objects.all().order_by("-created_at", "-id")
        student_id = (request.query_params.get("student_id") or "").strip()
        if student_id:
            qs = qs.filter(student_id=student_id)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(LegacyPaymentSerializer(page, many=True).data)
        return Response(LegacyPaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["billing"],
        request=RecordLegacyPaymentSerializer,
        responses={201: LegacyPaymentSerializer, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(LEGACY_CREATE_PERMISSION):
            return Response(
                {"detail": "You do not have permission to record legacy payments."},
                status=status.HTTP_403_FORBIDDEN,
            )

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            legacy = record_legacy_payment(
                student_id=data["student_id"],
                amount=data["amount"],
                or_number=data["or_number"],
                payment_method=data["payment_method"],
                school_year=data.get("school_year", ""),
                processed_by=request.user.pk,
            )
        except BillingServiceError as exc:
            return service_error_response(exc)

        return Response(LegacyPaymentSerializer(legacy).data, status=status.HTTP_201_CREATED)
