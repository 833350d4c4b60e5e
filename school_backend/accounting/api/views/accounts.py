# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API (READ-ONLY)

GET /api/accounting/accounts/                     active accounts (?include_inactive=1)
GET /api/accounting/accounts/<id>/balance/        running balance (?as_of=YYYY-MM-DD)

Permission-gated: requires accounting.view_account
"""

from django.utils.dateparse import parse_date
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import service_error_response
from accounting.api.serializers import AccountBalanceSerializer, AccountListSerializer
from accounting.services.account_service import get_account_by_id, list_accounts
from accounting.services.balance_service import get_account_balance
from accounting.services.exceptions import AccountingServiceError

ACCOUNT_VIEW_PERMISSION = "accounting.view_account"


class AccountListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountListSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(
                name="include_inactive",
                type=bool,
                required=False,
                description="Include deactivated accounts (default false).",
            ),
        ],
        responses=AccountListSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(ACCOUNT_VIEW_PERMISSION):
            return Response(
                {"detail": "You do not have permission to view accounts."},
                status=status.HTTP_403_FORBIDDEN,
            )

        include_inactive = (request.query_params.get("include_inactive") or "").lower() in (
            "1",
            "true",
            "yes",
        )
        qs = list_accounts(include_inactive=include_inactive)
        return Response(AccountListSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class AccountBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountBalanceSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(
                name="as_of",
                type=OpenApiTypes.DATE,
                required=False,
                description="Cutoff date (YYYY-MM-DD), inclusive. Defaults to all time.",
            ),
        ],
        responses={200: AccountBalanceSerializer, 400: dict, 404: dict},
    )
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(ACCOUNT_VIEW_PERMISSION):
            return Response(
                {"detail": "You do not have permission to view account balances."},
                status=status.HTTP_403_FORBIDDEN,
            )

        raw_as_of = request.query_params.get("as_of")
        as_of = parse_date(raw_as_of) if raw_as_of else None
        if raw_as_of and as_of is None:
            return Response(
                {"detail": "as_of must be a date (YYYY-MM-DD)"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            account = get_account_by_id(pk)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        payload = {
            "account_id": account.pk,
            "account_code": account.code,
            "account_name": account.name,
            "normal_balance": account.normal_balance,
            "as_of": as_of,
            "balance": get_account_balance(account.pk, as_of=as_of),
        }
        return Response(AccountBalanceSerializer(payload).data, status=status.HTTP_200_OK)
