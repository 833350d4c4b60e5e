# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.

Families:
- AccountingValidationError: bad input or a wrong state transition.
  Nothing is written when one of these is raised.
- AccountingIntegrityError: an expected business rejection
  (duplicate reference, closed period, close gate failed).
- AccountConfigurationError: required setup is missing (well-known accounts).
  Not transient; logged at critical level by the resolver.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class AccountingValidationError(AccountingServiceError):
    """Raised when input to an accounting operation is invalid."""


class JournalEntryCreationError(AccountingValidationError):
    """Raised when a journal entry cannot be created."""


class PostingRuleError(AccountingValidationError):
    """Raised when a business event is not in a postable state."""


class InvalidStateTransition(AccountingValidationError):
    """Raised when a status change is not allowed from the current status."""


class AccountingIntegrityError(AccountingServiceError):
    """Raised when an operation conflicts with existing accounting state."""


class IdempotencyError(AccountingIntegrityError):
    """Raised on duplicate or retried accounting events."""


class PeriodLockedError(AccountingIntegrityError):
    """Raised when attempting to post into a closed accounting period."""


class PeriodCloseError(AccountingIntegrityError):
    """Raised when a period cannot be closed in its current state."""


class AccountConfigurationError(AccountingServiceError):
    """Raised when a well-known account is missing or inactive."""


class AccountNotFoundError(AccountingServiceError):
    """Raised when an account lookup by code or id finds nothing."""


class JournalEntryNotFoundError(AccountingServiceError):
    """Raised when a journal entry lookup finds nothing."""


class PeriodNotFoundError(AccountingServiceError):
    """Raised when an accounting period lookup finds nothing."""
