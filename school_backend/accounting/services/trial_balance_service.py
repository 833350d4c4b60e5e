# accounting/services/trial_balance_service.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone
from django.utils.module_loading import import_string

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine

TWOPLACES = Decimal("0.01")

DEFAULT_TRIAL_BALANCE_CALCULATOR = (
    "accounting.services.trial_balance_service.TrialBalanceService"
)


def _q2(amount: Decimal) -> Decimal:
    return (amount or Decimal("0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_minor_int(amount: Decimal) -> int:
    return int((_q2(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TrialBalanceCheck:
    """
    Outcome of a trial balance as of a date.

    - balanced: total debits == total credits (to the cent)
    - difference: absolute gap between the two columns
    """

    as_of: date
    total_debit: Decimal
    total_credit: Decimal
    balanced: bool
    difference: Decimal


class TrialBalanceService:
    """
    Trial Balance computation service.

    Guarantees:
    - Uses POSTED journal_entry.entry_date as accounting timeline
    - Includes every account with activity (inactive accounts keep their history)
    - Each account shows its net balance in one column
    - Avoids N+1 queries by aggregating in bulk

    Any class exposing generate(as_of=...) and check(as_of=...) can replace
    this one through settings.ACCOUNTING_TRIAL_BALANCE_CALCULATOR.
    """

    def __init__(self, account_model=Account, line_model=JournalEntryLine):
        self.Account = account_model
        self.Line = line_model

    def _rows(self, cutoff: date):
        return (
            self.Line.objects.filter(
                entry__status=JournalEntry.STATUS_POSTED,
                entry__entry_date__lte=cutoff,
            )
            .values("account_id")
            .annotate(debit_total=Sum("debit"), credit_total=Sum("credit"))
        )

    def generate(self, *, as_of: date | None = None) -> dict:
        cutoff = as_of or timezone.localdate()

        rows = list(self._rows(cutoff))
        accounts = {
            a.id: a
            for a in self.Account.objects.filter(
                id__in=[r["account_id"] for r in rows]
            ).only("id", "code", "name", "normal_balance")
        }

        accounts_output = []
        total_debit = Decimal("0.00")
        total_credit = Decimal("0.00")

        for r in sorted(rows, key=lambda row: accounts[row["account_id"]].code):
            acc = accounts[r["account_id"]]
            net = _q2(r["debit_total"]) - _q2(r["credit_total"])
            if net == 0:
                continue

            debit = net if net > 0 else Decimal("0.00")
            credit = -net if net < 0 else Decimal("0.00")

            accounts_output.append(
                {
                    "account_id": acc.id,
                    "account_code": acc.code,
                    "account_name": acc.name,
                    "debit": debit,
                    "credit": credit,
                    "debit_minor": _to_minor_int(debit),
                    "credit_minor": _to_minor_int(credit),
                }
            )

            total_debit += debit
            total_credit += credit

        total_debit = _q2(total_debit)
        total_credit = _q2(total_credit)

        return {
            "as_of": cutoff.isoformat(),
            "accounts": accounts_output,
            "totals": {
                "debit": total_debit,
                "credit": total_credit,
                "debit_minor": _to_minor_int(total_debit),
                "credit_minor": _to_minor_int(total_credit),
                "balanced": _to_minor_int(total_debit) == _to_minor_int(total_credit),
                "difference": _q2(abs(total_debit - total_credit)),
            },
        }

    def check(self, *, as_of: date) -> TrialBalanceCheck:
        totals = self.generate(as_of=as_of)["totals"]
        return TrialBalanceCheck(
            as_of=as_of,
            total_debit=totals["debit"],
            total_credit=totals["credit"],
            balanced=totals["balanced"],
            difference=totals["difference"],
        )


def get_trial_balance_calculator():
    path = (
        getattr(settings, "ACCOUNTING_TRIAL_BALANCE_CALCULATOR", "")
        or DEFAULT_TRIAL_BALANCE_CALCULATOR
    )
    return import_string(path)()
