# billing/tests/test_api.py

from __future__ import annotations

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.balance_service import get_account_balance
from billing.models.discount import Discount
from billing.models.fee_schedule import FeeSchedule
from billing.models.ledger import LedgerPayment, StudentLedger
from billing.models.legacy_payment import LegacyPayment
from billing.models.school_year import SchoolYear

User = get_user_model()


class BillingApiTests(TestCase):
    def setUp(self):
        call_command("seed_school_chart", stdout=StringIO())
        SchoolYear.objects.create(name="2024-2025", is_active=True, is_open=True)
        FeeSchedule.objects.create(
            grade_level=3,
            tuition_fee=Decimal("22000.00"),
            misc_fee=Decimal("8000.00"),
            other_fee=Decimal("3500.00"),
        )

        self.cashier = User.objects.create_superuser(
            username="cashier", email="cashier@example.com", password="pass-1234"
        )
        self.guest = User.objects.create_user(username="guest", password="pass-1234")

        self.client = APIClient()
        self.client.force_authenticate(user=self.cashier)

    def _open_ledger(self, student_id="S-0003", grade_level="Grade 3"):
        response = self.client.post(
            "/api/billing/ledgers/current/",
            {"student_id": student_id, "grade_level": grade_level},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        return response.data

    # --------------------------------------------------
    # Security
    # --------------------------------------------------

    def test_anonymous_requests_are_rejected(self):
        response = APIClient().get("/api/billing/aging/")
        self.assertEqual(response.status_code, 401)

    def test_user_without_permission_gets_403(self):
        client = APIClient()
        client.force_authenticate(user=self.guest)

        self.assertEqual(
            client.post(
                "/api/billing/ledgers/current/", {"student_id": "S-0003"}, format="json"
            ).status_code,
            403,
        )
        self.assertEqual(
            client.post(
                "/api/billing/payments/",
                {"student_id": "S-0003", "amount": "100.00", "or_number": "OR-0001"},
                format="json",
            ).status_code,
            403,
        )
        self.assertEqual(client.get("/api/billing/aging/").status_code, 403)
        self.assertEqual(StudentLedger.objects.count(), 0)

    # --------------------------------------------------
    # Ledgers
    # --------------------------------------------------

    def test_open_ledger_returns_populated_detail(self):
        data = self._open_ledger()

        self.assertEqual(data["school_year"], "2024-2025")
        self.assertEqual(data["grade_level"], 3)
        self.assertEqual(data["grade_level_display"], "Grade 3")
        self.assertEqual(data["total_charges"], "33500.00")
        self.assertEqual(data["status"], StudentLedger.STATUS_UNPAID)
        self.assertEqual(len(data["charges"]), 3)
        self.assertEqual(data["payments"], [])

        again = self._open_ledger()
        self.assertEqual(again["id"], data["id"])
        self.assertEqual(len(again["charges"]), 3)

    def test_open_ledger_validation(self):
        bad_grade = self.client.post(
            "/api/billing/ledgers/current/",
            {"student_id": "S-0003", "grade_level": "Grade 42"},
            format="json",
        )
        self.assertEqual(bad_grade.status_code, 400)

        SchoolYear.objects.update(is_open=False)
        closed = self.client.post(
            "/api/billing/ledgers/current/", {"student_id": "S-0003"}, format="json"
        )
        self.assertEqual(closed.status_code, 409)

    def test_list_requires_student_id(self):
        self._open_ledger()

        self.assertEqual(self.client.get("/api/billing/ledgers/").status_code, 400)

        listing = self.client.get("/api/billing/ledgers/", {"student_id": "S-0003"})
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([row["school_year"] for row in listing.data], ["2024-2025"])

    def test_detail_and_not_found(self):
        ledger = self._open_ledger()

        detail = self.client.get(f"/api/billing/ledgers/{ledger['id']}/")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.data["balance"], "33500.00")

        self.assertEqual(self.client.get("/api/billing/ledgers/987654/").status_code, 404)

    def test_add_charge(self):
        ledger = self._open_ledger()

        response = self.client.post(
            f"/api/billing/ledgers/{ledger['id']}/charges/",
            {"charge_type": "LATE_FEE", "amount": "250.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["amount"], "250.00")

        discount_type = self.client.post(
            f"/api/billing/ledgers/{ledger['id']}/charges/",
            {"charge_type": "DISCOUNT", "amount": "250.00"},
            format="json",
        )
        self.assertEqual(discount_type.status_code, 400)

    def test_configured_discount_once(self):
        ledger = self._open_ledger()
        sibling = Discount.objects.create(
            discount_type="Sibling", discount_name="Sibling 10%", rate_or_value=Decimal("10.00")
        )
        url = f"/api/billing/ledgers/{ledger['id']}/discounts/"

        first = self.client.post(url, {"discount_id": sibling.pk}, format="json")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.data["amount"], "-2200.00")

        second = self.client.post(url, {"discount_id": sibling.pk}, format="json")
        self.assertEqual(second.status_code, 409)

        ad_hoc = self.client.post(
            url, {"discount_type": "Early Bird", "amount": "500.00"}, format="json"
        )
        self.assertEqual(ad_hoc.status_code, 201)

        incomplete = self.client.post(url, {"discount_type": "Early Bird"}, format="json")
        self.assertEqual(incomplete.status_code, 400)

        detail = self.client.get(f"/api/billing/ledgers/{ledger['id']}/")
        self.assertEqual(detail.data["balance"], "30800.00")

    def test_direct_ledger_payment_posts_and_rejects_overpayment(self):
        ledger = self._open_ledger()
        url = f"/api/billing/ledgers/{ledger['id']}/payments/"

        paid = self.client.post(url, {"amount": "10000.00", "or_number": "OR-0001"}, format="json")
        self.assertEqual(paid.status_code, 201)
        self.assertEqual(paid.data["payment_method"], "cash")
        self.assertEqual(paid.data["processed_by"], str(self.cashier.pk))

        entry = JournalEntry.objects.get(
            reference_type=JournalEntry.REF_PAYMENT, reference_id="OR-0001"
        )
        self.assertEqual(entry.status, JournalEntry.STATUS_POSTED)
        self.assertEqual(entry.total_debit, Decimal("10000.00"))
        cash = Account.objects.get(code="1000")
        self.assertEqual(get_account_balance(cash.pk), Decimal("10000.00"))
        self.assertEqual(
            LegacyPayment.objects.get(or_number="OR-0001").ledger_payment_id, paid.data["id"]
        )

        over = self.client.post(url, {"amount": "50000.00", "or_number": "OR-0002"}, format="json")
        self.assertEqual(over.status_code, 409)
        self.assertIn("exceeds balance", over.data["detail"])

        duplicate = self.client.post(
            url, {"amount": "100.00", "or_number": "OR-0001"}, format="json"
        )
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(LedgerPayment.objects.count(), 1)
        self.assertEqual(JournalEntry.objects.count(), 1)

    # --------------------------------------------------
    # Cashier flow
    # --------------------------------------------------

    def test_cashier_payment_posts_journal_entry(self):
        self._open_ledger()

        response = self.client.post(
            "/api/billing/payments/",
            {"student_id": "S-0003", "amount": "10000.00", "or_number": "OR-0001"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["ledger"]["balance"], "23500.00")
        self.assertEqual(response.data["ledger"]["status"], StudentLedger.STATUS_PARTIALLY_PAID)
        self.assertEqual(response.data["applied_amount"], "10000.00")
        self.assertEqual(response.data["unapplied_amount"], "0.00")
        self.assertEqual(response.data["journal_entry"]["status"], "POSTED")

        duplicate = self.client.post(
            "/api/billing/payments/",
            {"student_id": "S-0003", "amount": "100.00", "or_number": "OR-0001"},
            format="json",
        )
        self.assertEqual(duplicate.status_code, 409)

    def test_aging_lists_outstanding_balances(self):
        self._open_ledger("S-0003")
        self._open_ledger("S-0004")
        self.client.post(
            "/api/billing/payments/",
            {"student_id": "S-0004", "amount": "33500.00", "or_number": "OR-0001"},
            format="json",
        )

        response = self.client.get("/api/billing/aging/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["student_id"], "S-0003")

    def test_legacy_receipts(self):
        recorded = self.client.post(
            "/api/billing/legacy-payments/",
            {
                "student_id": "S-0100",
                "amount": "1500.00",
                "or_number": "OR-0900",
                "school_year": "2019-2020",
            },
            format="json",
        )
        self.assertEqual(recorded.status_code, 201)
        self.assertIsNone(recorded.data["ledger_payment"])

        listing = self.client.get("/api/billing/legacy-payments/", {"student_id": "S-0100"})
        self.assertEqual(listing.data["count"], 1)

        self._open_ledger()
        reused = self.client.post(
            "/api/billing/payments/",
            {"student_id": "S-0003", "amount": "100.00", "or_number": "OR-0900"},
            format="json",
        )
        self.assertEqual(reused.status_code, 409)
