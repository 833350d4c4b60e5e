# billing/management/commands/import_fee_schedules.py

"""
Load per-grade fee schedules from a CSV file.

Expected header: grade_level,tuition_fee,misc_fee,other_fee
grade_level accepts codes (-1..12) or names ("Kinder", "Grade 3", "G3").

Existing schedules are updated in place. Rows with an unrecognized grade
or a bad amount are reported and skipped; nothing is written with --dry-run.
"""

import csv
from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from billing.models.fee_schedule import FeeSchedule
from billing.services.grade_levels import grade_label, normalize_grade_level

REQUIRED_COLUMNS = ("grade_level", "tuition_fee", "misc_fee", "other_fee")


def _amount(raw) -> Decimal:
    value = Decimal(str(raw or "0").replace(",", "").strip() or "0")
    if value < 0:
        raise InvalidOperation("negative")
    return value.quantize(Decimal("0.01"))


class Command(BaseCommand):
    help = "Import per-grade fee schedules from CSV (grade_level,tuition_fee,misc_fee,other_fee)"

    def add_arguments(self, parser):
        parser.add_argument("csv_path", help="Path to the CSV file")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Validate and report without writing",
        )

    def handle(self, *args, **options):
        path = options["csv_path"]
        dry_run = options["dry_run"]

        try:
            with open(path, newline="", encoding="utf-8-sig") as fh:
                rows = list(csv.DictReader(fh))
        except OSError as exc:
            raise CommandError(f"Cannot read {path}: {exc}") from exc

        if rows:
            missing = [c for c in REQUIRED_COLUMNS if c not in rows[0]]
            if missing:
                raise CommandError(f"Missing column(s): {', '.join(missing)}")

        created = updated = skipped = 0

        with transaction.atomic():
            for line_no, row in enumerate(rows, start=2):
                grade = normalize_grade_level(row.get("grade_level"))
                if grade is None:
                    self.stdout.write(
                        self.style.WARNING(
                            f"Line {line_no}: unknown grade level {row.get('grade_level')!r}; skipped"
                        )
                    )
                    skipped += 1
                    continue

                try:
                    fees = {
                        "tuition_fee": _amount(row.get("tuition_fee")),
                        "misc_fee": _amount(row.get("misc_fee")),
                        "other_fee": _amount(row.get("other_fee")),
                    }
                except InvalidOperation:
                    self.stdout.write(
                        self.style.WARNING(f"Line {line_no}: invalid amount; skipped")
                    )
                    skipped += 1
                    continue

                if dry_run:
                    self.stdout.write(f"{grade_label(grade)}: {sum(fees.values())}")
                    continue

                _, was_created = FeeSchedule.objects.update_or_create(
                    grade_level=grade,
                    defaults={**fees, "is_active": True},
                )
                if was_created:
                    created += 1
                else:
                    updated += 1

        prefix = "[dry run] " if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix}Fee schedules imported ({created} new, {updated} updated, {skipped} skipped)."
            )
        )
