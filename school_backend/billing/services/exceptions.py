# billing/services/exceptions.py

"""
BILLING SERVICE ERRORS

Centralized domain errors for student billing.

- BillingValidationError: bad input (non-positive amounts, missing fields)
- BillingIntegrityError: expected business rejections
  (duplicate OR number, discount already applied, payment over balance)
"""


class BillingServiceError(Exception):
    """Base exception for all billing service failures."""


class BillingValidationError(BillingServiceError):
    """Raised when input to a billing operation is invalid."""


class BillingIntegrityError(BillingServiceError):
    """Raised when an operation conflicts with existing billing state."""


class DuplicateOrNumberError(BillingIntegrityError):
    """Raised when an OR number was already issued by any payment store."""


class DuplicateDiscountError(BillingIntegrityError):
    """Raised when a discount configuration is applied twice to one ledger."""


class PaymentExceedsBalanceError(BillingIntegrityError):
    """Raised when a payment is larger than the live ledger balance."""


class NoActiveSchoolYearError(BillingServiceError):
    """Raised when no school year is active and open for billing."""


class LedgerNotFoundError(BillingServiceError):
    """Raised when a ledger lookup finds nothing."""
