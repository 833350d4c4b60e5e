"""
PATH: accounting/api/views/trial_balance.py

TRIAL BALANCE API VIEW (READ-ONLY)

GET /api/accounting/trial-balance/?as_of=YYYY-MM-DD

Permission-gated: requires accounting.view_journalentry
Uses whichever calculator ACCOUNTING_TRIAL_BALANCE_CALCULATOR selects.
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.services.trial_balance_service import get_trial_balance_calculator


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(
            name="as_of",
            type=OpenApiTypes.DATE,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Cutoff date (YYYY-MM-DD), inclusive. Defaults to today.",
        ),
    ],
    responses={200: dict},
)
class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("accounting.view_journalentry"):
            return Response(
                {"detail": "You do not have permission to view trial balance."},
                status=status.HTTP_403_FORBIDDEN,
            )

        raw = request.query_params.get("as_of")
        as_of = parse_date(raw) if raw else None
        if raw and as_of is None:
            return Response(
                {"detail": "as_of must be a date (YYYY-MM-DD)"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        report = get_trial_balance_calculator().generate(as_of=as_of)
        return Response(report, status=status.HTTP_200_OK)
