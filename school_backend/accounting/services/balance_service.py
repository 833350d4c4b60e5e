# accounting/services/balance_service.py

"""
BALANCE SERVICE (AUTHORITATIVE)

Read-only journal aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- JournalEntryLine is the single source of truth
- Accounting timeline uses JournalEntry.entry_date
- Only POSTED journals count
- The account's normal_balance decides the sign
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def posted_lines(*, as_of: date | None = None):
    qs = JournalEntryLine.objects.filter(entry__status=JournalEntry.STATUS_POSTED)
    if as_of is not None:
        qs = qs.filter(entry__entry_date__lte=as_of)
    return qs


def signed_balance(account: Account, debit: Decimal, credit: Decimal) -> Decimal:
    """
    Balance rule:
    - Debit-normal accounts → debits - credits
    - Credit-normal accounts → credits - debits
    """
    if account.is_debit_normal:
        return _q2(debit - credit)
    return _q2(credit - debit)


def get_account_balance(account_id: int, *, as_of: date | None = None) -> Decimal:
    """
    Running balance of one account from its POSTED lines.

    Unknown accounts have a balance of zero.
    """
    try:
        account = Account.objects.filter(pk=account_id).first()
        if account is None:
            return ZERO

        aggregates = posted_lines(as_of=as_of).filter(account=account).aggregate(
            debit_total=Coalesce(Sum("debit"), ZERO),
            credit_total=Coalesce(Sum("credit"), ZERO),
        )
    except Exception:
        logger.exception(
            "Account balance computation failed",
            extra={"account_id": account_id, "as_of": str(as_of) if as_of else None},
        )
        raise

    return signed_balance(
        account,
        _q2(aggregates["debit_total"]),
        _q2(aggregates["credit_total"]),
    )
