# PATH: accounting/services/period_close_service.py

"""
PERIOD CLOSING CONTROLLER

Flips a monthly AccountingPeriod between open and closed.

Close gate (all inside ONE transaction, period row locked):
1) Period must not already be closed
2) No DRAFT journal entries dated inside the period
3) Trial balance as of the period end must be balanced

If any check fails nothing changes. Once closed, the period lock
(accounting/services/period_lock.py) refuses postings dated inside it.

Reopening requires a reason and clears the closer stamp.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.period import AccountingPeriod
from accounting.services.audit_service import record_audit_event
from accounting.services.exceptions import (
    AccountingValidationError,
    InvalidStateTransition,
    PeriodCloseError,
    PeriodNotFoundError,
)
from accounting.services.period_lock import is_date_in_closed_period  # noqa: F401 (re-export)
from accounting.services.trial_balance_service import get_trial_balance_calculator

logger = logging.getLogger(__name__)


def _validate_year_month(year, month) -> tuple[int, int]:
    try:
        year = int(year)
        month = int(month)
    except (TypeError, ValueError) as exc:
        raise AccountingValidationError("year and month must be integers") from exc

    if not 1 <= month <= 12:
        raise AccountingValidationError("month must be between 1 and 12")
    if year < 1900:
        raise AccountingValidationError("year is out of range")
    return year, month


def get_or_create_period(year, month) -> AccountingPeriod:
    year, month = _validate_year_month(year, month)

    period = AccountingPeriod.objects.filter(year=year, month=month).first()
    if period is not None:
        return period

    try:
        with transaction.atomic():
            return AccountingPeriod.objects.create(year=year, month=month)
    except (IntegrityError, ValidationError):
        # Race-safe: another request created it first
        return AccountingPeriod.objects.get(year=year, month=month)


def _lock_period(period_id) -> AccountingPeriod:
    try:
        return AccountingPeriod.objects.select_for_update().get(pk=period_id)
    except (AccountingPeriod.DoesNotExist, ValueError, TypeError) as exc:
        raise PeriodNotFoundError(f"Accounting period {period_id!r} not found") from exc


def draft_entries_in_period(period: AccountingPeriod):
    return JournalEntry.objects.filter(
        status=JournalEntry.STATUS_DRAFT,
        entry_date__gte=period.start_date,
        entry_date__lte=period.end_date,
    )


@transaction.atomic
def close_period(period_id, *, actor_id, notes: str | None = None) -> AccountingPeriod:
    period = _lock_period(period_id)

    if period.is_closed:
        raise InvalidStateTransition(f"Period {period.name} is already closed")

    drafts = draft_entries_in_period(period).count()
    if drafts:
        raise PeriodCloseError(
            f"Cannot close period. There are {drafts} draft journal entries "
            "that must be approved or rejected first."
        )

    check = get_trial_balance_calculator().check(as_of=period.end_date)
    if not check.balanced:
        logger.warning(
            "Period close blocked by unbalanced trial balance",
            extra={
                "period": period.name,
                "difference": str(check.difference),
                "total_debit": str(check.total_debit),
                "total_credit": str(check.total_credit),
            },
        )
        raise PeriodCloseError(
            "Cannot close period. Trial balance is not balanced. "
            f"Difference: {check.difference}"
        )

    period.is_closed = True
    period.closed_by = str(actor_id) if actor_id is not None else None
    period.closed_at = timezone.now()
    period.closing_notes = (notes or "").strip()
    period.save()

    logger.info(
        "Accounting period closed",
        extra={"period": period.name, "actor_id": actor_id},
    )
    record_audit_event(
        action="accounting_period.closed",
        actor_id=actor_id,
        entity_type="AccountingPeriod",
        entity_id=period.pk,
        summary={"period": period.name, "notes": period.closing_notes},
    )
    return period


@transaction.atomic
def reopen_period(period_id, *, actor_id, reason: str) -> AccountingPeriod:
    reason = (reason or "").strip()
    if not reason:
        raise AccountingValidationError("A reason is required to reopen a period")

    period = _lock_period(period_id)
    if not period.is_closed:
        raise InvalidStateTransition(f"Period {period.name} is not closed")

    period.is_closed = False
    period.closed_by = None
    period.closed_at = None
    period.closing_notes = reason
    period.reopened_by = str(actor_id) if actor_id is not None else None
    period.reopened_at = timezone.now()
    period.save()

    logger.warning(
        "Accounting period reopened",
        extra={"period": period.name, "actor_id": actor_id, "reason": reason},
    )
    record_audit_event(
        action="accounting_period.reopened",
        actor_id=actor_id,
        entity_type="AccountingPeriod",
        entity_id=period.pk,
        summary={"period": period.name, "reason": reason},
        severity="WARNING",
    )
    return period


def list_periods(*, year: int | None = None):
    qs = AccountingPeriod.objects.all().order_by("-year", "-month")
    if year is not None:
        qs = qs.filter(year=year)
    return qs


def get_current_period() -> AccountingPeriod:
    today = timezone.localdate()
    return get_or_create_period(today.year, today.month)
