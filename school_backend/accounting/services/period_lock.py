# accounting/services/period_lock.py

"""
======================================================
PATH: accounting/services/period_lock.py
======================================================
PERIOD LOCK GUARD

Purpose:
- Enforce accounting period locks globally.
- Prevent posting ANY journal entry whose entry_date
  falls within a closed accounting period.

Design:
- Thin, reusable guard
- Called by journal_entry_service (engine choke-point) on create and approve
"""

from __future__ import annotations

from datetime import date, datetime

from django.utils import timezone

from accounting.models.period import AccountingPeriod
from accounting.services.exceptions import PeriodLockedError


def _to_date(dt: datetime | date | None) -> date | None:
    if dt is None:
        return None
    if isinstance(dt, datetime):
        if timezone.is_naive(dt):
            dt = timezone.make_aware(dt, timezone.get_current_timezone())
        return timezone.localtime(dt).date()
    if isinstance(dt, date):
        return dt
    return None


def is_date_in_closed_period(value: datetime | date | None) -> bool:
    post_date = _to_date(value)
    if post_date is None:
        return False

    return AccountingPeriod.objects.filter(
        is_closed=True,
        start_date__lte=post_date,
        end_date__gte=post_date,
    ).exists()


def assert_period_open(*, entry_date: datetime | date | None) -> None:
    """
    Assert that entry_date does NOT fall inside a closed period.

    Usage:
        assert_period_open(entry_date=entry_date)

    Raises:
        PeriodLockedError if the date is locked.
    """
    if is_date_in_closed_period(entry_date):
        raise PeriodLockedError(
            f"Posting blocked: {_to_date(entry_date)} falls inside a closed accounting period."
        )
