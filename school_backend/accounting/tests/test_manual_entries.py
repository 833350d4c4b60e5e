# accounting/tests/test_manual_entries.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounting.models.audit import AuditEvent
from accounting.models.journal import JournalEntry
from accounting.models.period import AccountingPeriod
from accounting.services.balance_service import get_account_balance
from accounting.services.exceptions import (
    AccountingValidationError,
    InvalidStateTransition,
    JournalEntryCreationError,
    JournalEntryNotFoundError,
    PeriodLockedError,
)
from accounting.services.manual_entry_service import (
    approve_entry,
    create_manual_entry,
    list_pending_entries,
    reject_entry,
)


class ManualEntryWorkflowTests(TestCase):
    """
    Manual entries start as drafts, count toward nothing until approved,
    and can be approved or rejected exactly once.
    """

    def setUp(self):
        call_command("seed_school_chart", stdout=StringIO())

    def _create(
        self, debit="1500.00", credit="1500.00", entry_date=date(2024, 6, 5), **kwargs
    ):
        return create_manual_entry(
            entry_date=entry_date,
            description="Reclassify supplies",
            lines=[
                {"account_code": "5300", "debit": debit, "description": "Supplies"},
                {"account_code": "5100", "credit": credit, "description": "Other"},
            ],
            actor_id="11",
            **kwargs,
        )

    def test_manual_entry_starts_as_draft(self):
        entry = self._create(notes="Year-end cleanup")

        self.assertEqual(entry.status, JournalEntry.STATUS_DRAFT)
        self.assertEqual(entry.reference_type, JournalEntry.REF_MANUAL)
        self.assertEqual(entry.created_by, "11")
        self.assertIn("[Notes: Year-end cleanup]", entry.description)
        self.assertTrue(
            AuditEvent.objects.filter(
                action="journal_entry.manual_created", entity_id=str(entry.pk)
            ).exists()
        )

    def test_unbalanced_manual_entry_is_refused(self):
        with self.assertRaises(JournalEntryCreationError) as ctx:
            self._create(debit="500.00", credit="300.00")

        self.assertIn("Difference: 200.00", str(ctx.exception))
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_pending_list_shows_drafts_with_lines(self):
        entry = self._create()

        pending = list_pending_entries()

        self.assertEqual(len(pending), 1)
        self.assertEqual(pending[0]["id"], entry.pk)
        self.assertEqual(pending[0]["total_debit"], Decimal("1500.00"))
        self.assertEqual(pending[0]["total_credit"], Decimal("1500.00"))
        self.assertEqual(
            [line["account_code"] for line in pending[0]["lines"]], ["5300", "5100"]
        )

    def test_approve_posts_and_affects_balances(self):
        entry = self._create()
        supplies_id = entry.lines.get(line_number=1).account_id

        self.assertEqual(get_account_balance(supplies_id), Decimal("0.00"))

        approved = approve_entry(entry.pk, approver_id="12", notes="Checked")

        self.assertEqual(approved.status, JournalEntry.STATUS_POSTED)
        self.assertEqual(approved.approved_by, "12")
        self.assertIsNotNone(approved.approved_at)
        self.assertIn("[Approved: Checked]", approved.description)
        self.assertEqual(get_account_balance(supplies_id), Decimal("1500.00"))
        self.assertEqual(list_pending_entries(), [])

    def test_reject_requires_reason_and_is_final(self):
        entry = self._create()

        with self.assertRaises(AccountingValidationError):
            reject_entry(entry.pk, rejecter_id="12", reason="  ")

        rejected = reject_entry(entry.pk, rejecter_id="12", reason="Wrong account")
        self.assertEqual(rejected.status, JournalEntry.STATUS_REJECTED)
        self.assertIn("[Rejected: Wrong account]", rejected.description)

        with self.assertRaises(InvalidStateTransition):
            approve_entry(entry.pk, approver_id="12")

    def test_posted_entry_cannot_be_approved_again(self):
        entry = self._create()
        approve_entry(entry.pk, approver_id="12")

        with self.assertRaises(InvalidStateTransition):
            approve_entry(entry.pk, approver_id="12")
        with self.assertRaises(InvalidStateTransition):
            reject_entry(entry.pk, rejecter_id="12", reason="Too late")

    def test_unknown_entry_is_not_found(self):
        with self.assertRaises(JournalEntryNotFoundError):
            approve_entry(987654, approver_id="12")

    def test_approval_respects_a_period_closed_meanwhile(self):
        entry = self._create(entry_date=date(2024, 6, 5))
        period = AccountingPeriod.objects.create(year=2024, month=6)
        # Lock the period directly; the close gate itself would refuse the draft
        AccountingPeriod.objects.filter(pk=period.pk).update(is_closed=True)

        with self.assertRaises(PeriodLockedError):
            approve_entry(entry.pk, approver_id="12")

        entry.refresh_from_db()
        self.assertEqual(entry.status, JournalEntry.STATUS_DRAFT)
