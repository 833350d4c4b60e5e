# billing/tests/test_commands.py

import os
import tempfile
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from billing.models.fee_schedule import FeeSchedule
from billing.models.school_year import SchoolYear


class ImportFeeSchedulesCommandTests(TestCase):
    def _csv(self, content: str) -> str:
        fd, path = tempfile.mkstemp(suffix=".csv")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        self.addCleanup(os.remove, path)
        return path

    def test_imports_and_updates_schedules(self):
        FeeSchedule.objects.create(grade_level=3, tuition_fee=Decimal("1.00"))
        path = self._csv(
            "grade_level,tuition_fee,misc_fee,other_fee\n"
            "Grade 3,\"22,000.00\",8000,3500\n"
            "Kinder,15000,5000,1000\n"
            "Grade Forty,1,1,1\n"
            "G5,abc,1,1\n"
        )
        out = StringIO()

        call_command("import_fee_schedules", path, stdout=out)

        grade_three = FeeSchedule.objects.get(grade_level=3)
        self.assertEqual(grade_three.tuition_fee, Decimal("22000.00"))
        self.assertEqual(grade_three.total_fee, Decimal("33500.00"))
        self.assertEqual(FeeSchedule.objects.get(grade_level=0).total_fee, Decimal("21000.00"))
        self.assertFalse(FeeSchedule.objects.filter(grade_level=5).exists())

        output = out.getvalue()
        self.assertIn("Line 4: unknown grade level", output)
        self.assertIn("Line 5: invalid amount; skipped", output)
        self.assertIn("(1 new, 1 updated, 2 skipped)", output)

    def test_dry_run_writes_nothing(self):
        path = self._csv("grade_level,tuition_fee,misc_fee,other_fee\n3,22000,8000,3500\n")
        out = StringIO()

        call_command("import_fee_schedules", path, "--dry-run", stdout=out)

        self.assertEqual(FeeSchedule.objects.count(), 0)
        self.assertIn("Grade 3: 33500.00", out.getvalue())
        self.assertIn("[dry run] Fee schedules imported", out.getvalue())

    def test_missing_columns(self):
        path = self._csv("grade_level,tuition_fee\n3,22000\n")

        with self.assertRaisesMessage(CommandError, "Missing column(s): misc_fee, other_fee"):
            call_command("import_fee_schedules", path, stdout=StringIO())

    def test_unreadable_file(self):
        with self.assertRaisesMessage(CommandError, "Cannot read"):
            call_command(
                "import_fee_schedules", "/nonexistent/fees.csv", stdout=StringIO()
            )


class OpenSchoolYearCommandTests(TestCase):
    def test_opens_one_year_and_retires_the_rest(self):
        SchoolYear.objects.create(name="2023-2024", is_active=True, is_open=True)
        out = StringIO()

        call_command("open_school_year", "2024-2025", stdout=out)

        current = SchoolYear.objects.get(name="2024-2025")
        self.assertTrue(current.is_active)
        self.assertTrue(current.is_open)

        previous = SchoolYear.objects.get(name="2023-2024")
        self.assertFalse(previous.is_active)
        self.assertFalse(previous.is_open)
        self.assertIn("School year 2024-2025 is active and open.", out.getvalue())

    def test_reopening_existing_year(self):
        SchoolYear.objects.create(name="2024-2025", is_active=False, is_open=False)

        call_command("open_school_year", "2024-2025", stdout=StringIO())

        self.assertEqual(SchoolYear.objects.count(), 1)
        self.assertTrue(SchoolYear.objects.get().is_open)

    def test_bad_name_changes_nothing(self):
        SchoolYear.objects.create(name="2023-2024", is_active=True, is_open=True)

        for name in ("2024", "2024-2026"):
            with self.subTest(name=name):
                with self.assertRaises(CommandError):
                    call_command("open_school_year", name, stdout=StringIO())

        self.assertTrue(SchoolYear.objects.get(name="2023-2024").is_active)
