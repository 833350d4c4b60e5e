# accounting/api/views/periods.py

"""
PATH: accounting/api/views/periods.py

ACCOUNTING PERIOD API

GET  /api/accounting/periods/                 list periods (?year=2024)
POST /api/accounting/periods/close/           close by period_id or (year, month)
POST /api/accounting/periods/<id>/reopen/     reopen with a reason

Security:
- viewing requires accounting.view_accountingperiod
- closing / reopening requires accounting.change_accountingperiod
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import service_error_response
from accounting.api.serializers import (
    AccountingPeriodSerializer,
    ClosePeriodSerializer,
    ReopenPeriodSerializer,
)
from accounting.services.exceptions import AccountingServiceError
from accounting.services.period_close_service import (
    close_period,
    get_or_create_period,
    list_periods,
    reopen_period,
)

PERIOD_VIEW_PERMISSION = "accounting.view_accountingperiod"
PERIOD_CLOSE_PERMISSION = "accounting.change_accountingperiod"


class AccountingPeriodListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountingPeriodSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter(name="year", type=int, required=False)],
        responses=AccountingPeriodSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(PERIOD_VIEW_PERMISSION):
            return Response(
                {"detail": "You do not have permission to view accounting periods."},
                status=status.HTTP_403_FORBIDDEN,
            )

        year = request.query_params.get("year")
        if year:
            try:
                year = int(year)
            except (TypeError, ValueError):
                return Response(
                    {"detail": "year must be an integer"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        qs = list_periods(year=year or None)
        return Response(AccountingPeriodSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class ClosePeriodView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ClosePeriodSerializer

    @extend_schema(
        tags=["accounting"],
        request=ClosePeriodSerializer,
        responses={200: AccountingPeriodSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(PERIOD_CLOSE_PERMISSION):
            return Response(
                {"detail": "You do not have permission to close accounting periods."},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            period_id = data.get("period_id")
            if period_id is None:
                period_id = get_or_create_period(data["year"], data["month"]).pk
            period = close_period(period_id, actor_id=request.user.pk, notes=data.get("notes"))
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountingPeriodSerializer(period).data, status=status.HTTP_200_OK)


class ReopenPeriodView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReopenPeriodSerializer

    @extend_schema(
        tags=["accounting"],
        request=ReopenPeriodSerializer,
        responses={200: AccountingPeriodSerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(PERIOD_CLOSE_PERMISSION):
            return Response(
                {"detail": "You do not have permission to reopen accounting periods."},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            period = reopen_period(
                pk, actor_id=request.user.pk, reason=serializer.validated_data["reason"]
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountingPeriodSerializer(period).data, status=status.HTTP_200_OK)
