# billing/management/commands/open_school_year.py

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from billing.models.school_year import SchoolYear


class Command(BaseCommand):
    help = "Make a school year (e.g. 2024-2025) the single active, open billing year"

    def add_arguments(self, parser):
        parser.add_argument("name", help="School year, e.g. 2024-2025")

    @transaction.atomic
    def handle(self, *args, **options):
        name = (options["name"] or "").strip()

        SchoolYear.objects.exclude(name=name).filter(is_active=True).update(
            is_active=False, is_open=False
        )

        year = SchoolYear.objects.filter(name=name).first() or SchoolYear(name=name)
        year.is_active = True
        year.is_open = True
        try:
            year.save()
        except ValidationError as exc:
            raise CommandError("; ".join(exc.messages)) from exc

        self.stdout.write(self.style.SUCCESS(f"School year {year.name} is active and open."))
