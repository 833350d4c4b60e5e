"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: INITIAL ACCOUNTING SCHEMA

Creates:
- Chart of accounts, journal entries and lines, per-year journal sequence
- Accounting periods (month close)
- Expense and payroll business events
- Audit event outbox
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                    ),
                ),
                (
                    "normal_balance",
                    models.CharField(
                        max_length=6,
                        choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")],
                        blank=True,
                        help_text="Defaults from account_type when left blank",
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        to="accounting.account",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="children",
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "indexes": [
                    models.Index(fields=["account_type"], name="accounting__account_889d6d_idx"),
                    models.Index(fields=["is_active"], name="accounting__is_acti_28dd04_idx"),
                    models.Index(fields=["parent"], name="accounting__parent__da6035_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=~models.Q(code=""),
                        name="chk_account_code_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=~models.Q(name=""),
                        name="chk_account_name_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("entry_number", models.CharField(max_length=20, unique=True)),
                (
                    "entry_date",
                    models.DateField(
                        default=django.utils.timezone.localdate,
                        help_text="Accounting effective date",
                    ),
                ),
                (
                    "description",
                    models.TextField(help_text="Narrative description of the journal entry"),
                ),
                (
                    "reference_type",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("PAYMENT", "Payment"),
                            ("EXPENSE", "Expense"),
                            ("PAYROLL", "Payroll"),
                            ("MANUAL", "Manual"),
                        ],
                        default="MANUAL",
                    ),
                ),
                (
                    "reference_id",
                    models.CharField(
                        max_length=100,
                        blank=True,
                        null=True,
                        help_text="Id of the originating business event (payment, expense, payroll)",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("DRAFT", "Draft"),
                            ("POSTED", "Posted"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="DRAFT",
                    ),
                ),
                ("created_by", models.CharField(max_length=64, blank=True, null=True)),
                (
                    "approved_by",
                    models.CharField(
                        max_length=64,
                        blank=True,
                        null=True,
                        help_text="Approver (or rejecter) actor id",
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "total_debit",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "total_credit",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        help_text="Timestamp when the journal entry was created",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-entry_date", "-created_at"],
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "indexes": [
                    models.Index(fields=["entry_date"], name="accounting__entry_d_79c286_idx"),
                    models.Index(fields=["status"], name="accounting__status_0a2ff9_idx"),
                    models.Index(
                        fields=["status", "entry_date"], name="accounting__status_553504_idx"
                    ),
                    models.Index(
                        fields=["reference_type", "reference_id"],
                        name="accounting__referen_4bf694_idx",
                    ),
                    models.Index(fields=["created_at"], name="accounting__created_daff7c_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["reference_type", "reference_id"],
                        condition=models.Q(reference_type__in=["PAYMENT", "EXPENSE", "PAYROLL"])
                        & models.Q(reference_id__isnull=False),
                        name="uniq_journal_system_reference",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(status__in=["DRAFT", "POSTED", "REJECTED"]),
                        name="chk_journal_status_valid",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntryLine",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("line_number", models.PositiveIntegerField()),
                (
                    "debit",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "credit",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                (
                    "entry",
                    models.ForeignKey(
                        to="accounting.journalentry",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                    ),
                ),
                (
                    "account",
                    models.ForeignKey(
                        to="accounting.account",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                    ),
                ),
            ],
            options={
                "ordering": ["entry", "line_number"],
                "verbose_name": "Journal Entry Line",
                "verbose_name_plural": "Journal Entry Lines",
                "indexes": [
                    models.Index(fields=["account"], name="accounting__account_6fdc67_idx"),
                    models.Index(fields=["entry"], name="accounting__entry_i_27304d_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["entry", "line_number"],
                        name="uniq_journal_line_number",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(line_number__gte=1),
                        name="chk_journal_line_number_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(debit__gte=0) & models.Q(credit__gte=0),
                        name="chk_journal_line_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=~(models.Q(debit__gt=0) & models.Q(credit__gt=0)),
                        name="chk_journal_line_one_side",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("year", models.PositiveIntegerField(unique=True)),
                ("last_value", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-year"],
                "verbose_name": "Journal Sequence",
                "verbose_name_plural": "Journal Sequences",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(year__gte=1900),
                        name="chk_journal_sequence_year_sane",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountingPeriod",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("year", models.PositiveIntegerField()),
                ("month", models.PositiveSmallIntegerField()),
                ("name", models.CharField(max_length=30)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("is_closed", models.BooleanField(default=False)),
                ("closed_by", models.CharField(max_length=64, blank=True, null=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("closing_notes", models.TextField(blank=True, default="")),
                ("reopened_by", models.CharField(max_length=64, blank=True, null=True)),
                ("reopened_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-year", "-month"],
                "verbose_name": "Accounting Period",
                "verbose_name_plural": "Accounting Periods",
                "indexes": [
                    models.Index(
                        fields=["start_date", "end_date"], name="accounting__start_d_cbbeeb_idx"
                    ),
                    models.Index(fields=["is_closed"], name="accounting__is_clos_779852_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["year", "month"],
                        name="uniq_accounting_period_year_month",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(month__gte=1) & models.Q(month__lte=12),
                        name="chk_accounting_period_month_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="chk_accounting_period_end_gte_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("expense_code", models.CharField(max_length=30, unique=True)),
                ("category", models.CharField(max_length=100)),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                (
                    "amount",
                    models.DecimalField(
                        max_digits=14,
                        decimal_places=2,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "payment_method",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("cash", "Cash"),
                            ("bank", "Bank Transfer"),
                            ("check", "Check"),
                        ],
                        default="cash",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="PENDING",
                    ),
                ),
                ("approved_by", models.CharField(max_length=64, blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-expense_date", "-created_at"],
                "verbose_name": "Expense",
                "verbose_name_plural": "Expenses",
                "indexes": [
                    models.Index(fields=["expense_date"], name="accounting__expense_7b88ca_idx"),
                    models.Index(fields=["status"], name="accounting__status_198e00_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="chk_expense_amount_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PayrollTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("transaction_code", models.CharField(max_length=40, unique=True)),
                ("employee_id", models.CharField(max_length=64)),
                ("pay_period", models.CharField(max_length=50, blank=True, default="")),
                ("gross_salary", models.DecimalField(max_digits=14, decimal_places=2)),
                (
                    "total_deductions",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                ("net_salary", models.DecimalField(max_digits=14, decimal_places=2)),
                (
                    "total_company_contribution",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("PAID", "Paid"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="PENDING",
                    ),
                ),
                ("payment_date", models.DateField(blank=True, null=True)),
                ("batch_timestamp", models.CharField(max_length=40, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name": "Payroll Transaction",
                "verbose_name_plural": "Payroll Transactions",
                "indexes": [
                    models.Index(fields=["status"], name="accounting__status_816834_idx"),
                    models.Index(
                        fields=["batch_timestamp"], name="accounting__batch_t_36c3c6_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(gross_salary__gte=0)
                        & models.Q(total_deductions__gte=0)
                        & models.Q(total_company_contribution__gte=0),
                        name="chk_payroll_amounts_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("action", models.CharField(max_length=100)),
                ("actor_id", models.CharField(max_length=64, blank=True, null=True)),
                ("entity_type", models.CharField(max_length=100)),
                ("entity_id", models.CharField(max_length=100, blank=True, default="")),
                ("summary", models.JSONField(default=dict, blank=True)),
                (
                    "severity",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("INFO", "Info"),
                            ("WARNING", "Warning"),
                            ("CRITICAL", "Critical"),
                        ],
                        default="INFO",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("dispatched_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["created_at", "id"],
                "verbose_name": "Audit Event",
                "verbose_name_plural": "Audit Events",
                "indexes": [
                    models.Index(
                        fields=["entity_type", "entity_id"], name="accounting__entity__b2d65a_idx"
                    ),
                    models.Index(fields=["dispatched_at"], name="accounting__dispatc_11ad1a_idx"),
                ],
            },
        ),
    ]
