# accounting/management/commands/seed_school_chart.py

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account
from accounting.services.account_resolver import well_known_codes

# (semantic key or None, default code, name, type)
SCHOOL_ACCOUNTS = [
    # ASSETS
    ("CASH", "1000", "Cash", Account.ASSET),
    (None, "1100", "Accounts Receivable - Students", Account.ASSET),
    # LIABILITIES
    ("ACCRUED_PAYROLL_TAXES", "2100", "Accrued Payroll Taxes", Account.LIABILITY),
    # EQUITY
    (None, "3000", "Fund Balance", Account.EQUITY),
    # REVENUE
    ("TUITION_REVENUE", "4000", "Tuition Revenue", Account.REVENUE),
    # EXPENSES
    ("SALARIES_EXPENSE", "5000", "Salaries Expense", Account.EXPENSE),
    ("OTHER_EXPENSES", "5100", "Other Expenses", Account.EXPENSE),
    ("UTILITIES_EXPENSE", "5200", "Utilities Expense", Account.EXPENSE),
    ("SUPPLIES_EXPENSE", "5300", "Supplies Expense", Account.EXPENSE),
    ("RENT_EXPENSE", "5400", "Rent Expense", Account.EXPENSE),
    ("MAINTENANCE_EXPENSE", "5500", "Maintenance Expense", Account.EXPENSE),
    ("OFFICE_EXPENSE", "5600", "Office Expense", Account.EXPENSE),
]


class Command(BaseCommand):
    help = "Seed the school chart of accounts (every account the posting rules resolve)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding school chart of accounts...")

        codes = well_known_codes()
        created_count = 0
        updated_count = 0

        for key, default_code, name, account_type in SCHOOL_ACCOUNTS:
            code = codes.get(key, default_code) if key else default_code

            acc, acc_created = Account.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "account_type": account_type,
                    "is_active": True,
                },
            )

            if acc_created:
                created_count += 1
                continue

            if acc.account_type != account_type:
                self.stdout.write(
                    self.style.WARNING(
                        f"Account {code} is {acc.account_type}, expected {account_type}; left unchanged"
                    )
                )
                continue

            if not acc.is_active:
                acc.is_active = True
                acc.save(update_fields=["is_active", "updated_at"])
                updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"School chart seeded ({created_count} new accounts, {updated_count} reactivated)."
            )
        )
