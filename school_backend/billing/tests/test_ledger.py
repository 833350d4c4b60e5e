# billing/tests/test_ledger.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase, override_settings

from billing.models.fee_schedule import FeeSchedule
from billing.models.ledger import LedgerCharge, StudentLedger
from billing.models.school_year import SchoolYear
from billing.services import ledger_service
from billing.services.exceptions import (
    BillingValidationError,
    DuplicateOrNumberError,
    LedgerNotFoundError,
    NoActiveSchoolYearError,
    PaymentExceedsBalanceError,
)
from billing.services.providers import StudentGradeResolver


class GradeThreeResolver(StudentGradeResolver):
    def get_grade_level(self, student_id):
        return "Grade 3"


def make_school_year(name="2024-2025", *, active=True, open_=True):
    return SchoolYear.objects.create(name=name, is_active=active, is_open=open_)


def make_grade_three_schedule():
    return FeeSchedule.objects.create(
        grade_level=3,
        tuition_fee=Decimal("22000.00"),
        misc_fee=Decimal("8000.00"),
        other_fee=Decimal("3500.00"),
    )


class StudentLedgerLifecycleTests(TestCase):
    """
    GUARANTEES:
    - One ledger per (student, school year), populated once from the fee schedule
    - Totals, balance and status always follow the charge and payment rows
    - Payments never exceed the balance and OR numbers are never reused
    """

    def setUp(self):
        make_school_year()
        make_grade_three_schedule()

    def test_grade_three_year_from_enrolment_to_fully_paid(self):
        ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)

        self.assertEqual(ledger.school_year, "2024-2025")
        self.assertEqual(
            sorted(ledger.charges.values_list("charge_type", "amount")),
            [
                (LedgerCharge.TYPE_MISC, Decimal("8000.00")),
                (LedgerCharge.TYPE_OTHER, Decimal("3500.00")),
                (LedgerCharge.TYPE_TUITION, Decimal("22000.00")),
            ],
        )
        self.assertEqual(ledger.total_charges, Decimal("33500.00"))
        self.assertEqual(ledger.balance, Decimal("33500.00"))
        self.assertEqual(ledger.status, StudentLedger.STATUS_UNPAID)

        ledger_service.add_payment(
            ledger.pk, amount="10000", or_number="OR-0001", payment_method="cash"
        )
        ledger.refresh_from_db()
        self.assertEqual(ledger.total_payments, Decimal("10000.00"))
        self.assertEqual(ledger.balance, Decimal("23500.00"))
        self.assertEqual(ledger.status, StudentLedger.STATUS_PARTIALLY_PAID)

        ledger_service.add_payment(
            ledger.pk, amount="23500", or_number="OR-0002", payment_method="cash"
        )
        ledger.refresh_from_db()
        self.assertEqual(ledger.balance, Decimal("0.00"))
        self.assertEqual(ledger.status, StudentLedger.STATUS_FULLY_PAID)

        with self.assertRaises(PaymentExceedsBalanceError) as ctx:
            ledger_service.add_payment(
                ledger.pk, amount="100", or_number="OR-0003", payment_method="cash"
            )
        self.assertEqual(
            str(ctx.exception),
            "Payment amount (Php 100.00) exceeds balance (Php 0.00).",
        )
        self.assertEqual(ledger.payments.count(), 2)

    def test_populate_is_idempotent(self):
        ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)

        again = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)
        self.assertEqual(again.pk, ledger.pk)
        self.assertEqual(ledger_service.populate_initial_charges(ledger.pk), [])
        ledger_service.ensure_consistent(ledger.pk)

        self.assertEqual(StudentLedger.objects.count(), 1)
        self.assertEqual(ledger.charges.count(), 3)
        ledger.refresh_from_db()
        self.assertEqual(ledger.total_charges, Decimal("33500.00"))

    def test_cached_totals_are_repaired_from_rows(self):
        ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)
        StudentLedger.objects.filter(pk=ledger.pk).update(
            total_charges=Decimal("1.00"),
            balance=Decimal("1.00"),
            status=StudentLedger.STATUS_FULLY_PAID,
        )

        repaired = ledger_service.get_ledger(ledger.pk)

        self.assertEqual(repaired.total_charges, Decimal("33500.00"))
        self.assertEqual(repaired.balance, Decimal("33500.00"))
        self.assertEqual(repaired.status, StudentLedger.STATUS_UNPAID)

    def test_payment_check_uses_live_rows_not_cached_balance(self):
        ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)
        StudentLedger.objects.filter(pk=ledger.pk).update(balance=Decimal("99999.00"))

        with self.assertRaises(PaymentExceedsBalanceError):
            ledger_service.add_payment(
                ledger.pk, amount="40000", or_number="OR-0009", payment_method="cash"
            )

    def test_extra_charges_raise_the_balance(self):
        ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)

        charge = ledger_service.add_charge(
            ledger.pk, charge_type=LedgerCharge.TYPE_LATE_FEE, amount="500"
        )

        self.assertEqual(charge.description, "Late Fee")
        ledger.refresh_from_db()
        self.assertEqual(ledger.balance, Decimal("34000.00"))

        with self.assertRaises(BillingValidationError):
            ledger_service.add_charge(
                ledger.pk, charge_type=LedgerCharge.TYPE_DISCOUNT, amount="500"
            )
        with self.assertRaises(BillingValidationError):
            ledger_service.add_charge(
                ledger.pk, charge_type=LedgerCharge.TYPE_LATE_FEE, amount="-5"
            )

    def test_payment_input_validation(self):
        ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)

        with self.assertRaises(BillingValidationError):
            ledger_service.add_payment(
                ledger.pk, amount="0", or_number="OR-0001", payment_method="cash"
            )
        with self.assertRaises(BillingValidationError):
            ledger_service.add_payment(
                ledger.pk, amount="100", or_number="  ", payment_method="cash"
            )
        with self.assertRaises(BillingValidationError):
            ledger_service.add_payment(
                ledger.pk, amount="abc", or_number="OR-0001", payment_method="cash"
            )

    def test_or_number_cannot_be_reused_on_any_ledger(self):
        first = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)
        second = ledger_service.get_or_create_for_current_year("S-0004", grade_level=3)
        ledger_service.add_payment(
            first.pk, amount="1000", or_number="OR-0001", payment_method="cash"
        )

        with self.assertRaises(DuplicateOrNumberError):
            ledger_service.add_payment(
                second.pk, amount="1000", or_number="OR-0001", payment_method="cash"
            )
        second.refresh_from_db()
        self.assertEqual(second.total_payments, Decimal("0.00"))

    def test_unknown_ledger_is_not_found(self):
        with self.assertRaises(LedgerNotFoundError):
            ledger_service.get_ledger(987654)
        with self.assertRaises(LedgerNotFoundError):
            ledger_service.get_ledger_for_student("S-0003", "2019-2020")

    def test_ledgers_listed_newest_year_first(self):
        ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)
        StudentLedger.objects.create(student_id="S-0003", school_year="2023-2024")

        years = list(
            ledger_service.list_ledgers_for_student("S-0003").values_list(
                "school_year", flat=True
            )
        )
        self.assertEqual(years, ["2024-2025", "2023-2024"])


class SchoolYearAndGradeTests(TestCase):
    def test_billing_requires_an_active_open_year(self):
        with self.assertRaises(NoActiveSchoolYearError):
            ledger_service.get_or_create_for_current_year("S-0001", grade_level=3)

        make_school_year(active=True, open_=False)
        with self.assertRaises(NoActiveSchoolYearError):
            ledger_service.get_or_create_for_current_year("S-0001", grade_level=3)

        self.assertEqual(StudentLedger.objects.count(), 0)

    def test_ledger_without_grade_gets_no_charges_until_grade_known(self):
        make_school_year()
        make_grade_three_schedule()

        with self.assertLogs("billing.services.ledger_service", level="WARNING"):
            ledger = ledger_service.get_or_create_for_current_year("S-0001")
        self.assertIsNone(ledger.grade_level)
        self.assertEqual(ledger.charges.count(), 0)
        self.assertEqual(ledger.balance, Decimal("0.00"))

        ledger = ledger_service.get_or_create_for_current_year("S-0001", grade_level="Grade 3")
        self.assertEqual(ledger.grade_level, 3)
        self.assertEqual(ledger.total_charges, Decimal("33500.00"))

    def test_grade_is_fixed_once_set(self):
        make_school_year()
        make_grade_three_schedule()
        ledger_service.get_or_create_for_current_year("S-0001", grade_level=3)

        with self.assertLogs("billing.services.ledger_service", level="WARNING"):
            ledger = ledger_service.get_or_create_for_current_year("S-0001", grade_level=5)

        self.assertEqual(ledger.grade_level, 3)
        self.assertEqual(ledger.total_charges, Decimal("33500.00"))

    def test_grade_without_fee_schedule_is_logged(self):
        make_school_year()

        with self.assertLogs("billing.services.ledger_service", level="WARNING") as logs:
            ledger = ledger_service.get_or_create_for_current_year("S-0001", grade_level=7)

        self.assertEqual(ledger.charges.count(), 0)
        self.assertIn("No fee schedule", "\n".join(logs.output))

    def test_unknown_grade_is_rejected(self):
        make_school_year()

        with self.assertRaises(BillingValidationError):
            ledger_service.get_or_create_for_current_year("S-0001", grade_level="Grade 42")

    @override_settings(
        BILLING_STUDENT_GRADE_RESOLVER="billing.tests.test_ledger.GradeThreeResolver"
    )
    def test_grade_resolver_fills_in_missing_grade(self):
        make_school_year()
        make_grade_three_schedule()

        ledger = ledger_service.get_or_create_for_current_year("S-0001")

        self.assertEqual(ledger.grade_level, 3)
        self.assertEqual(ledger.balance, Decimal("33500.00"))

    def test_blank_student_id_is_rejected(self):
        make_school_year()

        with self.assertRaises(BillingValidationError):
            ledger_service.get_or_create_for_current_year("  ", grade_level=3)
