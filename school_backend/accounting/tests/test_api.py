# accounting/tests/test_api.py

from __future__ import annotations

from datetime import date
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.journal_entry_service import create_journal_entry

User = get_user_model()


class AccountingApiTests(TestCase):
    def setUp(self):
        call_command("seed_school_chart", stdout=StringIO())

        self.admin = User.objects.create_superuser(
            username="bursar", email="bursar@example.com", password="pass-1234"
        )
        self.clerk = User.objects.create_user(username="clerk", password="pass-1234")

        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def _manual_payload(self, debit="500.00", credit="500.00"):
        return {
            "entry_date": "2024-06-05",
            "description": "Reclassify supplies",
            "lines": [
                {"account_code": "5300", "debit": debit, "credit": "0.00"},
                {"account_code": "5100", "debit": "0.00", "credit": credit},
            ],
        }

    # --------------------------------------------------
    # Security
    # --------------------------------------------------

    def test_anonymous_requests_are_rejected(self):
        response = APIClient().get("/api/accounting/accounts/")
        self.assertEqual(response.status_code, 401)

    def test_user_without_permission_gets_403(self):
        client = APIClient()
        client.force_authenticate(user=self.clerk)

        self.assertEqual(client.get("/api/accounting/accounts/").status_code, 403)
        self.assertEqual(client.get("/api/accounting/journal-entries/").status_code, 403)
        self.assertEqual(
            client.post(
                "/api/accounting/journal-entries/manual/", self._manual_payload(), format="json"
            ).status_code,
            403,
        )
        self.assertEqual(client.get("/api/accounting/trial-balance/").status_code, 403)
        self.assertEqual(JournalEntry.objects.count(), 0)

    # --------------------------------------------------
    # Accounts
    # --------------------------------------------------

    def test_account_list_and_balance(self):
        create_journal_entry(
            description="Tuition received",
            lines=[
                {"account_code": "1000", "debit": "750.00"},
                {"account_code": "4000", "credit": "750.00"},
            ],
            entry_date=date(2024, 6, 1),
            status=JournalEntry.STATUS_POSTED,
        )
        cash = Account.objects.get(code="1000")

        listing = self.client.get("/api/accounting/accounts/")
        self.assertEqual(listing.status_code, 200)
        self.assertIn("1000", [row["code"] for row in listing.data])

        balance = self.client.get(f"/api/accounting/accounts/{cash.pk}/balance/")
        self.assertEqual(balance.status_code, 200)
        self.assertEqual(balance.data["balance"], "750.00")

        early = self.client.get(
            f"/api/accounting/accounts/{cash.pk}/balance/", {"as_of": "2024-05-31"}
        )
        self.assertEqual(early.data["balance"], "0.00")

    def test_balance_validation_and_not_found(self):
        cash = Account.objects.get(code="1000")

        bad_date = self.client.get(
            f"/api/accounting/accounts/{cash.pk}/balance/", {"as_of": "yesterday"}
        )
        self.assertEqual(bad_date.status_code, 400)

        missing = self.client.get("/api/accounting/accounts/987654/balance/")
        self.assertEqual(missing.status_code, 404)

    # --------------------------------------------------
    # Manual entry workflow
    # --------------------------------------------------

    def test_manual_entry_create_approve_flow(self):
        created = self.client.post(
            "/api/accounting/journal-entries/manual/", self._manual_payload(), format="json"
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.data["status"], JournalEntry.STATUS_DRAFT)
        self.assertEqual(created.data["created_by"], str(self.admin.pk))
        self.assertEqual(len(created.data["lines"]), 2)

        pending = self.client.get("/api/accounting/journal-entries/pending/")
        self.assertEqual(pending.data["count"], 1)

        entry_id = created.data["id"]
        approved = self.client.post(
            f"/api/accounting/journal-entries/{entry_id}/approve/", {}, format="json"
        )
        self.assertEqual(approved.status_code, 200)
        self.assertEqual(approved.data["status"], JournalEntry.STATUS_POSTED)

        again = self.client.post(
            f"/api/accounting/journal-entries/{entry_id}/approve/", {}, format="json"
        )
        self.assertEqual(again.status_code, 400)

    def test_unbalanced_manual_entry_returns_400_with_difference(self):
        response = self.client.post(
            "/api/accounting/journal-entries/manual/",
            self._manual_payload(debit="500.00", credit="300.00"),
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("Difference: 200.00", response.data["detail"])
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_manual_entry_needs_two_lines(self):
        payload = self._manual_payload()
        payload["lines"] = payload["lines"][:1]

        response = self.client.post(
            "/api/accounting/journal-entries/manual/", payload, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_reject_requires_reason(self):
        created = self.client.post(
            "/api/accounting/journal-entries/manual/", self._manual_payload(), format="json"
        )
        url = f"/api/accounting/journal-entries/{created.data['id']}/reject/"

        self.assertEqual(self.client.post(url, {}, format="json").status_code, 400)

        rejected = self.client.post(url, {"reason": "Duplicate"}, format="json")
        self.assertEqual(rejected.status_code, 200)
        self.assertEqual(rejected.data["status"], JournalEntry.STATUS_REJECTED)

    def test_entry_list_filters_and_detail(self):
        self.client.post(
            "/api/accounting/journal-entries/manual/", self._manual_payload(), format="json"
        )

        drafts = self.client.get("/api/accounting/journal-entries/", {"status": "DRAFT"})
        self.assertEqual(drafts.status_code, 200)
        self.assertEqual(drafts.data["count"], 1)

        posted = self.client.get("/api/accounting/journal-entries/", {"status": "POSTED"})
        self.assertEqual(posted.data["count"], 0)

        entry_id = drafts.data["results"][0]["id"]
        detail = self.client.get(f"/api/accounting/journal-entries/{entry_id}/")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.data["entry_number"], "JE-2024-001")

        self.assertEqual(
            self.client.get("/api/accounting/journal-entries/987654/").status_code, 404
        )

    # --------------------------------------------------
    # Periods and trial balance
    # --------------------------------------------------

    def test_close_period_by_year_month_then_locked(self):
        closed = self.client.post(
            "/api/accounting/periods/close/", {"year": 2024, "month": 6}, format="json"
        )
        self.assertEqual(closed.status_code, 200)
        self.assertTrue(closed.data["is_closed"])

        locked = self.client.post(
            "/api/accounting/journal-entries/manual/", self._manual_payload(), format="json"
        )
        self.assertEqual(locked.status_code, 409)

        twice = self.client.post(
            "/api/accounting/periods/close/", {"period_id": closed.data["id"]}, format="json"
        )
        self.assertEqual(twice.status_code, 400)

        reopened = self.client.post(
            f"/api/accounting/periods/{closed.data['id']}/reopen/",
            {"reason": "Late receipt"},
            format="json",
        )
        self.assertEqual(reopened.status_code, 200)
        self.assertFalse(reopened.data["is_closed"])

    def test_close_blocked_by_draft_returns_409(self):
        self.client.post(
            "/api/accounting/journal-entries/manual/", self._manual_payload(), format="json"
        )

        response = self.client.post(
            "/api/accounting/periods/close/", {"year": 2024, "month": 6}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertIn("draft", response.data["detail"])

    def test_trial_balance(self):
        create_journal_entry(
            description="Tuition received",
            lines=[
                {"account_code": "1000", "debit": "750.00"},
                {"account_code": "4000", "credit": "750.00"},
            ],
            entry_date=date(2024, 6, 1),
            status=JournalEntry.STATUS_POSTED,
        )

        response = self.client.get("/api/accounting/trial-balance/", {"as_of": "2024-06-30"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["as_of"], "2024-06-30")
        self.assertTrue(response.data["totals"]["balanced"])
        self.assertEqual(len(response.data["accounts"]), 2)

        bad = self.client.get("/api/accounting/trial-balance/", {"as_of": "June"})
        self.assertEqual(bad.status_code, 400)
