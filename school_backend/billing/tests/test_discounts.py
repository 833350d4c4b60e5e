# billing/tests/test_discounts.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from billing.models.discount import Discount
from billing.models.fee_schedule import FeeSchedule
from billing.models.ledger import LedgerCharge, StudentLedger
from billing.models.school_year import SchoolYear
from billing.services import ledger_service
from billing.services.discount_service import (
    calculate_discount_amount,
    deactivate_discount,
)
from billing.services.exceptions import BillingValidationError, DuplicateDiscountError


class DiscountCalculationTests(TestCase):
    def _discount(self, **kwargs):
        defaults = {
            "discount_type": "Sibling",
            "discount_name": "Sibling 10%",
            "rate_or_value": Decimal("10.00"),
            "is_percentage": True,
        }
        defaults.update(kwargs)
        return Discount(**defaults)

    def test_percentage_of_base(self):
        self.assertEqual(
            calculate_discount_amount(self._discount(), Decimal("22000.00")), Decimal("2200.00")
        )

    def test_fixed_value_ignores_base(self):
        discount = self._discount(is_percentage=False, rate_or_value=Decimal("1500.00"))
        self.assertEqual(calculate_discount_amount(discount, Decimal("99.00")), Decimal("1500.00"))

    def test_min_and_max_clamp(self):
        discount = self._discount(min_amount=Decimal("500.00"), max_amount=Decimal("2000.00"))

        self.assertEqual(calculate_discount_amount(discount, Decimal("1000.00")), Decimal("500.00"))
        self.assertEqual(
            calculate_discount_amount(discount, Decimal("50000.00")), Decimal("2000.00")
        )

    def test_inactive_discount_yields_nothing(self):
        discount = self._discount(is_active=False)
        self.assertEqual(calculate_discount_amount(discount, Decimal("22000.00")), Decimal("0.00"))

    def test_percentage_over_hundred_is_invalid(self):
        with self.assertRaises(ValidationError):
            Discount.objects.create(
                discount_type="Scholarship",
                discount_name="Too generous",
                rate_or_value=Decimal("150.00"),
            )


class LedgerDiscountTests(TestCase):
    def setUp(self):
        SchoolYear.objects.create(name="2024-2025", is_active=True, is_open=True)
        FeeSchedule.objects.create(
            grade_level=3,
            tuition_fee=Decimal("22000.00"),
            misc_fee=Decimal("8000.00"),
            other_fee=Decimal("3500.00"),
        )
        self.ledger = ledger_service.get_or_create_for_current_year("S-0003", grade_level=3)
        self.sibling = Discount.objects.create(
            discount_type="Sibling",
            discount_name="Sibling 10%",
            rate_or_value=Decimal("10.00"),
        )

    def test_configured_discount_uses_tuition_as_base(self):
        charge = ledger_service.apply_configured_discount(
            self.ledger.pk, discount_id=self.sibling.pk
        )

        self.assertEqual(charge.charge_type, LedgerCharge.TYPE_DISCOUNT)
        self.assertEqual(charge.amount, Decimal("-2200.00"))
        self.assertEqual(charge.discount_id, self.sibling.pk)

        self.ledger.refresh_from_db()
        self.assertEqual(self.ledger.total_charges, Decimal("31300.00"))
        self.assertEqual(self.ledger.balance, Decimal("31300.00"))
        self.assertEqual(self.ledger.status, StudentLedger.STATUS_UNPAID)

    def test_same_discount_applies_only_once(self):
        ledger_service.apply_configured_discount(self.ledger.pk, discount_id=self.sibling.pk)

        with self.assertRaises(DuplicateDiscountError):
            ledger_service.apply_configured_discount(self.ledger.pk, discount_id=self.sibling.pk)
        with self.assertRaises(DuplicateDiscountError):
            ledger_service.apply_discount(
                self.ledger.pk,
                discount_type="Sibling",
                amount="100",
                discount_id=self.sibling.pk,
            )

        self.assertEqual(
            self.ledger.charges.filter(charge_type=LedgerCharge.TYPE_DISCOUNT).count(), 1
        )
        self.ledger.refresh_from_db()
        self.assertEqual(self.ledger.balance, Decimal("31300.00"))

    def test_same_discount_on_another_ledger_is_fine(self):
        other = ledger_service.get_or_create_for_current_year("S-0004", grade_level=3)

        ledger_service.apply_configured_discount(self.ledger.pk, discount_id=self.sibling.pk)
        ledger_service.apply_configured_discount(other.pk, discount_id=self.sibling.pk)

        self.assertEqual(self.sibling.ledger_charges.count(), 2)

    def test_ad_hoc_discount_without_configuration(self):
        charge = ledger_service.apply_discount(
            self.ledger.pk, discount_type="Early Bird", amount="1000"
        )

        self.assertEqual(charge.description, "Early Bird Discount")
        self.assertIsNone(charge.discount_id)
        self.ledger.refresh_from_db()
        self.assertEqual(self.ledger.balance, Decimal("32500.00"))

    def test_discount_input_validation(self):
        with self.assertRaises(BillingValidationError):
            ledger_service.apply_discount(self.ledger.pk, discount_type="Sibling", amount="0")
        with self.assertRaises(BillingValidationError):
            ledger_service.apply_discount(self.ledger.pk, discount_type="  ", amount="100")
        with self.assertRaises(BillingValidationError):
            ledger_service.apply_discount(
                self.ledger.pk, discount_type="Sibling", amount="100", discount_id=987654
            )

    def test_configured_discount_with_explicit_base(self):
        charge = ledger_service.apply_configured_discount(
            self.ledger.pk, discount_id=self.sibling.pk, base_amount=Decimal("33500.00")
        )
        self.assertEqual(charge.amount, Decimal("-3350.00"))

    def test_deactivate_keeps_referenced_discounts(self):
        unused = Discount.objects.create(
            discount_type="Promo", discount_name="Promo 5%", rate_or_value=Decimal("5.00")
        )
        ledger_service.apply_configured_discount(self.ledger.pk, discount_id=self.sibling.pk)

        self.assertFalse(deactivate_discount(self.sibling.pk))
        self.sibling.refresh_from_db()
        self.assertFalse(self.sibling.is_active)

        self.assertTrue(deactivate_discount(unused.pk))
        self.assertFalse(Discount.objects.filter(pk=unused.pk).exists())

        other = ledger_service.get_or_create_for_current_year("S-0004", grade_level=3)
        with self.assertRaises(BillingValidationError):
            ledger_service.apply_configured_discount(other.pk, discount_id=self.sibling.pk)
