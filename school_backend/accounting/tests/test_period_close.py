# accounting/tests/test_period_close.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.period import AccountingPeriod
from accounting.services.exceptions import (
    AccountingValidationError,
    InvalidStateTransition,
    PeriodCloseError,
    PeriodLockedError,
    PeriodNotFoundError,
)
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.period_close_service import (
    close_period,
    get_current_period,
    get_or_create_period,
    list_periods,
    reopen_period,
)
from accounting.services.period_lock import is_date_in_closed_period
from accounting.services.trial_balance_service import (
    TrialBalanceCheck,
    TrialBalanceService,
)


class OffByTenCalculator:
    """Trial balance stand-in that always reports a 10.00 gap."""

    def generate(self, *, as_of=None):
        return {}

    def check(self, *, as_of):
        return TrialBalanceCheck(
            as_of=as_of,
            total_debit=Decimal("110.00"),
            total_credit=Decimal("100.00"),
            balanced=False,
            difference=Decimal("10.00"),
        )


class PeriodCloseTests(TestCase):
    def setUp(self):
        call_command("seed_school_chart", stdout=StringIO())
        self.period = get_or_create_period(2024, 6)

    def _entry(self, *, entry_date=date(2024, 6, 15), status=JournalEntry.STATUS_POSTED):
        return create_journal_entry(
            description="Tuition received",
            lines=[
                {"account_code": "1000", "debit": "2000.00"},
                {"account_code": "4000", "credit": "2000.00"},
            ],
            entry_date=entry_date,
            status=status,
        )

    # --------------------------------------------------
    # Period records
    # --------------------------------------------------

    def test_period_bounds_and_name_are_derived(self):
        self.assertEqual(self.period.name, "June 2024")
        self.assertEqual(self.period.start_date, date(2024, 6, 1))
        self.assertEqual(self.period.end_date, date(2024, 6, 30))

        february = get_or_create_period(2024, 2)
        self.assertEqual(february.end_date, date(2024, 2, 29))

    def test_get_or_create_is_idempotent_and_validates(self):
        self.assertEqual(get_or_create_period("2024", "6").pk, self.period.pk)
        self.assertEqual(AccountingPeriod.objects.count(), 1)

        with self.assertRaises(AccountingValidationError):
            get_or_create_period(2024, 13)
        with self.assertRaises(AccountingValidationError):
            get_or_create_period("twenty", 1)

    def test_periods_listed_newest_first(self):
        get_or_create_period(2023, 12)
        get_or_create_period(2024, 1)

        names = [p.name for p in list_periods()]
        self.assertEqual(names, ["June 2024", "January 2024", "December 2023"])
        self.assertEqual([p.month for p in list_periods(year=2024)], [6, 1])

    def test_current_period_covers_today(self):
        today = timezone.localdate()

        current = get_current_period()

        self.assertEqual((current.year, current.month), (today.year, today.month))
        self.assertEqual(get_current_period().pk, current.pk)

    # --------------------------------------------------
    # Close gate
    # --------------------------------------------------

    def test_close_succeeds_when_clean(self):
        self._entry()

        closed = close_period(self.period.pk, actor_id="5", notes="June books done")

        self.assertTrue(closed.is_closed)
        self.assertEqual(closed.closed_by, "5")
        self.assertIsNotNone(closed.closed_at)
        self.assertEqual(closed.closing_notes, "June books done")

    def test_close_is_blocked_by_drafts(self):
        self._entry(status=JournalEntry.STATUS_DRAFT)

        with self.assertRaises(PeriodCloseError) as ctx:
            close_period(self.period.pk, actor_id="5")

        self.assertIn("1 draft journal entries", str(ctx.exception))
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)

    def test_drafts_outside_the_period_do_not_block(self):
        self._entry(entry_date=date(2024, 7, 1), status=JournalEntry.STATUS_DRAFT)

        self.assertTrue(close_period(self.period.pk, actor_id="5").is_closed)

    @override_settings(
        ACCOUNTING_TRIAL_BALANCE_CALCULATOR="accounting.tests.test_period_close.OffByTenCalculator"
    )
    def test_close_is_blocked_by_unbalanced_trial_balance(self):
        with self.assertLogs("accounting.services.period_close_service", level="WARNING"):
            with self.assertRaises(PeriodCloseError) as ctx:
                close_period(self.period.pk, actor_id="5")

        self.assertIn("Difference: 10.00", str(ctx.exception))
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)

    def test_closing_twice_is_refused(self):
        close_period(self.period.pk, actor_id="5")

        with self.assertRaises(InvalidStateTransition):
            close_period(self.period.pk, actor_id="5")

    def test_unknown_period_is_not_found(self):
        with self.assertRaises(PeriodNotFoundError):
            close_period(987654, actor_id="5")

    # --------------------------------------------------
    # Lock
    # --------------------------------------------------

    def test_closed_period_refuses_new_entries(self):
        close_period(self.period.pk, actor_id="5")

        self.assertTrue(is_date_in_closed_period(date(2024, 6, 30)))
        self.assertFalse(is_date_in_closed_period(date(2024, 7, 1)))

        with self.assertRaises(PeriodLockedError):
            self._entry(entry_date=date(2024, 6, 20))
        with self.assertRaises(PeriodLockedError):
            self._entry(entry_date=date(2024, 6, 20), status=JournalEntry.STATUS_DRAFT)

        # Next month is still open
        self.assertIsNotNone(self._entry(entry_date=date(2024, 7, 1)).pk)

    def test_reopen_requires_reason_and_unlocks(self):
        close_period(self.period.pk, actor_id="5")

        with self.assertRaises(AccountingValidationError):
            reopen_period(self.period.pk, actor_id="5", reason="")

        reopened = reopen_period(self.period.pk, actor_id="6", reason="Late receipt")

        self.assertFalse(reopened.is_closed)
        self.assertIsNone(reopened.closed_by)
        self.assertEqual(reopened.reopened_by, "6")
        self.assertEqual(reopened.closing_notes, "Late receipt")
        self.assertIsNotNone(self._entry(entry_date=date(2024, 6, 20)).pk)

    def test_reopening_an_open_period_is_refused(self):
        with self.assertRaises(InvalidStateTransition):
            reopen_period(self.period.pk, actor_id="5", reason="Nothing to reopen")


class TrialBalanceTests(TestCase):
    def setUp(self):
        call_command("seed_school_chart", stdout=StringIO())

    def _post(self, debit_code, credit_code, amount, entry_date):
        create_journal_entry(
            description="Activity",
            lines=[
                {"account_code": debit_code, "debit": amount},
                {"account_code": credit_code, "credit": amount},
            ],
            entry_date=entry_date,
            status=JournalEntry.STATUS_POSTED,
        )

    def test_each_account_is_netted_into_one_column(self):
        self._post("1000", "4000", "10000.00", date(2024, 6, 1))
        self._post("5300", "1000", "2500.00", date(2024, 6, 2))

        report = TrialBalanceService().generate(as_of=date(2024, 6, 30))

        rows = {row["account_code"]: (row["debit"], row["credit"]) for row in report["accounts"]}
        self.assertEqual(
            rows,
            {
                "1000": (Decimal("7500.00"), Decimal("0.00")),
                "4000": (Decimal("0.00"), Decimal("10000.00")),
                "5300": (Decimal("2500.00"), Decimal("0.00")),
            },
        )
        self.assertEqual(report["totals"]["debit"], Decimal("10000.00"))
        self.assertEqual(report["totals"]["credit"], Decimal("10000.00"))
        self.assertTrue(report["totals"]["balanced"])
        self.assertEqual(report["totals"]["debit_minor"], 1000000)

    def test_as_of_cutoff_and_zero_rows(self):
        self._post("1000", "4000", "500.00", date(2024, 6, 1))
        self._post("4000", "1000", "500.00", date(2024, 6, 2))
        self._post("1000", "4000", "300.00", date(2024, 7, 1))

        june = TrialBalanceService().generate(as_of=date(2024, 6, 30))
        self.assertEqual(june["accounts"], [])
        self.assertEqual(june["as_of"], "2024-06-30")

        check = TrialBalanceService().check(as_of=date(2024, 7, 31))
        self.assertTrue(check.balanced)
        self.assertEqual(check.total_debit, Decimal("300.00"))
        self.assertEqual(check.difference, Decimal("0.00"))
