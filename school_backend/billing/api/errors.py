# billing/api/errors.py

"""
Service error -> HTTP response mapping for billing endpoints.

- validation problems          -> 400
- integrity / business rules   -> 409 (duplicate OR, duplicate discount, overpayment)
- missing ledger               -> 404
- no open school year          -> 409 (billing is closed, not a bad request)
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountConfigurationError,
    AccountingIntegrityError,
    AccountingServiceError,
)
from billing.services.exceptions import (
    BillingIntegrityError,
    BillingServiceError,
    LedgerNotFoundError,
    NoActiveSchoolYearError,
)


def service_error_response(exc: BillingServiceError | AccountingServiceError) -> Response:
    if isinstance(exc, LedgerNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (BillingIntegrityError, NoActiveSchoolYearError, AccountingIntegrityError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, AccountConfigurationError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)
