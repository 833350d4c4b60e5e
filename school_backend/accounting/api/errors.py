# accounting/api/errors.py

"""
Service error -> HTTP response mapping for accounting endpoints.

- AccountingValidationError          -> 400 (nothing was written)
- AccountingIntegrityError           -> 409 (closed period, close gate, duplicate)
- *NotFoundError                     -> 404
- AccountConfigurationError          -> 500 (setup problem, already logged critical)
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountConfigurationError,
    AccountingIntegrityError,
    AccountingServiceError,
    AccountNotFoundError,
    JournalEntryNotFoundError,
    PeriodNotFoundError,
)

NOT_FOUND_ERRORS = (AccountNotFoundError, JournalEntryNotFoundError, PeriodNotFoundError)


def service_error_response(exc: AccountingServiceError) -> Response:
    if isinstance(exc, NOT_FOUND_ERRORS):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AccountingIntegrityError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, AccountConfigurationError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)
