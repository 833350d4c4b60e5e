# accounting/tests/test_postings.py

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.expense import Expense
from accounting.models.journal import JournalEntry
from accounting.models.payroll import PayrollTransaction
from accounting.services.exceptions import (
    AccountConfigurationError,
    PostingRuleError,
)
from accounting.services.posting import (
    post_batch_payroll_entry,
    post_expense_entry,
    post_payment_entry,
    post_payroll_entry,
)


def _seed_chart():
    call_command("seed_school_chart", stdout=StringIO())


def _lines_by_code(entry):
    return {
        line.account.code: (line.debit, line.credit)
        for line in entry.lines.select_related("account")
    }


class PaymentPostingTests(TestCase):
    def setUp(self):
        _seed_chart()

    def _payment(self, amount="10000.00", or_number="OR-0001"):
        return SimpleNamespace(
            pk=1,
            amount=Decimal(amount),
            or_number=or_number,
            student_id="S-0001",
            created_at=timezone.make_aware(datetime(2024, 6, 10, 9, 30)),
        )

    def test_payment_debits_cash_and_credits_tuition(self):
        entry = post_payment_entry(self._payment(), actor_id="7")

        self.assertEqual(entry.status, JournalEntry.STATUS_POSTED)
        self.assertEqual(entry.reference_type, JournalEntry.REF_PAYMENT)
        self.assertEqual(entry.reference_id, "OR-0001")
        self.assertEqual(entry.entry_date, date(2024, 6, 10))
        self.assertEqual(entry.created_by, "7")
        self.assertEqual(
            _lines_by_code(entry),
            {
                "1000": (Decimal("10000.00"), Decimal("0.00")),
                "4000": (Decimal("0.00"), Decimal("10000.00")),
            },
        )

    def test_same_receipt_is_posted_once(self):
        first = post_payment_entry(self._payment())
        second = post_payment_entry(self._payment())

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(
            JournalEntry.objects.filter(reference_type=JournalEntry.REF_PAYMENT).count(), 1
        )

    def test_zero_payment_is_refused(self):
        with self.assertRaises(PostingRuleError):
            post_payment_entry(self._payment(amount="0.00"))

    def test_missing_chart_is_a_configuration_error(self):
        Account.objects.filter(code="1000").update(is_active=False)

        with self.assertLogs("accounting.services.account_resolver", level="CRITICAL"):
            with self.assertRaises(AccountConfigurationError):
                post_payment_entry(self._payment())
        self.assertEqual(JournalEntry.objects.count(), 0)


class ExpensePostingTests(TestCase):
    def setUp(self):
        _seed_chart()

    def _expense(self, *, status=Expense.STATUS_APPROVED, category="Electric bill"):
        return Expense.objects.create(
            expense_code="EXP-001",
            category=category,
            description="June",
            amount=Decimal("4500.00"),
            expense_date=date(2024, 6, 30),
            status=status,
            approved_by="3",
        )

    def test_approved_expense_posts_to_category_account(self):
        entry = post_expense_entry(self._expense(), actor_id="7")

        self.assertEqual(entry.reference_type, JournalEntry.REF_EXPENSE)
        self.assertEqual(entry.entry_date, date(2024, 6, 30))
        self.assertEqual(entry.approved_by, "3")
        self.assertEqual(
            _lines_by_code(entry),
            {
                "5200": (Decimal("4500.00"), Decimal("0.00")),
                "1000": (Decimal("0.00"), Decimal("4500.00")),
            },
        )

    def test_unmapped_category_uses_other_expenses(self):
        entry = post_expense_entry(self._expense(category="Field trip"))
        self.assertIn("5100", _lines_by_code(entry))

    def test_pending_expense_is_not_posted(self):
        with self.assertRaises(PostingRuleError):
            post_expense_entry(self._expense(status=Expense.STATUS_PENDING))
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_expense_is_posted_once(self):
        expense = self._expense()
        first = post_expense_entry(expense)
        second = post_expense_entry(expense)
        self.assertEqual(first.pk, second.pk)


class PayrollPostingTests(TestCase):
    def setUp(self):
        _seed_chart()

    def _payroll(
        self, code, *, gross, deductions, contribution, status=PayrollTransaction.STATUS_PAID
    ):
        gross = Decimal(gross)
        deductions = Decimal(deductions)
        return PayrollTransaction.objects.create(
            transaction_code=code,
            employee_id=f"EMP-{code}",
            pay_period="2024-06",
            gross_salary=gross,
            total_deductions=deductions,
            net_salary=gross - deductions,
            total_company_contribution=Decimal(contribution),
            status=status,
            payment_date=date(2024, 6, 30),
        )

    def test_single_payroll_entry_balances(self):
        payroll = self._payroll("PR-001", gross="30000", deductions="4000", contribution="2500")

        entry = post_payroll_entry(payroll, actor_id="7")

        self.assertEqual(entry.reference_id, "PR-001")
        self.assertEqual(entry.total_debit, entry.total_credit)
        self.assertEqual(
            _lines_by_code(entry),
            {
                "5000": (Decimal("32500.00"), Decimal("0.00")),
                "1000": (Decimal("0.00"), Decimal("26000.00")),
                "2100": (Decimal("0.00"), Decimal("6500.00")),
            },
        )

    def test_payroll_without_withholdings_has_two_lines(self):
        payroll = self._payroll("PR-002", gross="15000", deductions="0", contribution="0")

        entry = post_payroll_entry(payroll)

        self.assertEqual(entry.lines.count(), 2)

    def test_unpaid_payroll_is_not_posted(self):
        payroll = self._payroll(
            "PR-003",
            gross="15000",
            deductions="0",
            contribution="0",
            status=PayrollTransaction.STATUS_APPROVED,
        )
        with self.assertRaises(PostingRuleError):
            post_payroll_entry(payroll)

    def test_batch_posts_one_summed_entry(self):
        batch = [
            self._payroll("PR-010", gross="30000", deductions="4000", contribution="2500"),
            self._payroll("PR-011", gross="20000", deductions="2000", contribution="1500"),
        ]

        entry = post_batch_payroll_entry(batch, actor_id="7")

        self.assertEqual(entry.reference_id, "PR-010")
        self.assertEqual(
            _lines_by_code(entry),
            {
                "5000": (Decimal("54000.00"), Decimal("0.00")),
                "1000": (Decimal("0.00"), Decimal("44000.00")),
                "2100": (Decimal("0.00"), Decimal("10000.00")),
            },
        )

        # Repeat returns the same entry
        self.assertEqual(post_batch_payroll_entry(batch).pk, entry.pk)
        self.assertEqual(
            JournalEntry.objects.filter(reference_type=JournalEntry.REF_PAYROLL).count(), 1
        )

    def test_empty_batch_is_refused(self):
        with self.assertRaises(PostingRuleError):
            post_batch_payroll_entry([])
