"""
======================================================
PATH: billing/migrations/0001_initial.py
======================================================
MIGRATION: INITIAL BILLING SCHEMA

Creates:
- School years, fee schedules and discount configuration
- Student ledgers with their charges and payments
- Legacy payment log and the shared OR number registry
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models

GRADE_LEVEL_CHOICES = [
    (-1, "Nursery"),
    (0, "Kinder"),
    (1, "Grade 1"),
    (2, "Grade 2"),
    (3, "Grade 3"),
    (4, "Grade 4"),
    (5, "Grade 5"),
    (6, "Grade 6"),
    (7, "Grade 7"),
    (8, "Grade 8"),
    (9, "Grade 9"),
    (10, "Grade 10"),
    (11, "Grade 11"),
    (12, "Grade 12"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SchoolYear",
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
                ("name", models.CharField(max_length=20, unique=True)),
                ("is_active", models.BooleanField(default=False)),
                ("is_open", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-name"],
                "verbose_name": "School Year",
                "verbose_name_plural": "School Years",
            },
        ),
        migrations.CreateModel(
            name="FeeSchedule",
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
                (
                    "grade_level",
                    models.SmallIntegerField(choices=GRADE_LEVEL_CHOICES, unique=True),
                ),
                (
                    "tuition_fee",
                    models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "misc_fee",
                    models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "other_fee",
                    models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00")),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["grade_level"],
                "verbose_name": "Fee Schedule",
                "verbose_name_plural": "Fee Schedules",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(tuition_fee__gte=0)
                        & models.Q(misc_fee__gte=0)
                        & models.Q(other_fee__gte=0),
                        name="chk_fee_schedule_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Discount",
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
                ("discount_type", models.CharField(max_length=50)),
                ("discount_name", models.CharField(max_length=100, unique=True)),
                ("rate_or_value", models.DecimalField(max_digits=12, decimal_places=2)),
                ("is_percentage", models.BooleanField(default=True)),
                (
                    "min_amount",
                    models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True),
                ),
                (
                    "max_amount",
                    models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True),
                ),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["discount_name"],
                "verbose_name": "Discount",
                "verbose_name_plural": "Discounts",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(rate_or_value__gte=0),
                        name="chk_discount_value_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(min_amount__isnull=True)
                        | models.Q(max_amount__isnull=True)
                        | models.Q(max_amount__gte=models.F("min_amount")),
                        name="chk_discount_max_gte_min",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StudentLedger",
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
                ("student_id", models.CharField(max_length=64)),
                ("school_year", models.CharField(max_length=20)),
                (
                    "grade_level",
                    models.SmallIntegerField(
                        choices=GRADE_LEVEL_CHOICES,
                        null=True,
                        blank=True,
                        help_text="Fixed when the ledger is created; back-filled if missing",
                    ),
                ),
                (
                    "total_charges",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "total_payments",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "balance",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("UNPAID", "Unpaid"),
                            ("PARTIALLY_PAID", "Partially Paid"),
                            ("FULLY_PAID", "Fully Paid"),
                        ],
                        default="UNPAID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-school_year", "student_id"],
                "verbose_name": "Student Ledger",
                "verbose_name_plural": "Student Ledgers",
                "indexes": [
                    models.Index(fields=["school_year"], name="billing_stu_school__dc409e_idx"),
                    models.Index(fields=["balance"], name="billing_stu_balance_203109_idx"),
                    models.Index(fields=["status"], name="billing_stu_status_144d4b_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["student_id", "school_year"],
                        name="uniq_student_ledger_per_year",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerCharge",
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
                (
                    "charge_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("TUITION", "Tuition"),
                            ("MISC", "Miscellaneous"),
                            ("OTHER", "Other Fees"),
                            ("ADJUSTMENT", "Adjustment"),
                            ("LATE_FEE", "Late Fee"),
                            ("DISCOUNT", "Discount"),
                        ],
                    ),
                ),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                (
                    "amount",
                    models.DecimalField(
                        max_digits=14,
                        decimal_places=2,
                        help_text="Positive for charges, negative for discounts",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ledger",
                    models.ForeignKey(
                        to="billing.studentledger",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="charges",
                    ),
                ),
                (
                    "discount",
                    models.ForeignKey(
                        to="billing.discount",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="ledger_charges",
                    ),
                ),
            ],
            options={
                "ordering": ["ledger", "created_at", "id"],
                "verbose_name": "Ledger Charge",
                "verbose_name_plural": "Ledger Charges",
                "indexes": [
                    models.Index(
                        fields=["ledger", "charge_type"], name="billing_led_ledger__d72265_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["ledger", "discount"],
                        condition=models.Q(discount__isnull=False),
                        name="uniq_ledger_discount_once",
                    ),
                    models.CheckConstraint(
                        condition=(models.Q(charge_type="DISCOUNT") & models.Q(amount__lt=0))
                        | (~models.Q(charge_type="DISCOUNT") & models.Q(amount__gt=0)),
                        name="chk_ledger_charge_sign",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerPayment",
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
                ("amount", models.DecimalField(max_digits=14, decimal_places=2)),
                ("or_number", models.CharField(max_length=50, unique=True)),
                ("payment_method", models.CharField(max_length=30)),
                ("processed_by", models.CharField(max_length=64, blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ledger",
                    models.ForeignKey(
                        to="billing.studentledger",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                    ),
                ),
            ],
            options={
                "ordering": ["ledger", "created_at", "id"],
                "verbose_name": "Ledger Payment",
                "verbose_name_plural": "Ledger Payments",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="chk_ledger_payment_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LegacyPayment",
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
                ("student_id", models.CharField(max_length=64)),
                ("amount", models.DecimalField(max_digits=14, decimal_places=2)),
                ("payment_method", models.CharField(max_length=30)),
                ("or_number", models.CharField(max_length=50, unique=True)),
                ("processed_by", models.CharField(max_length=64, blank=True, null=True)),
                ("school_year", models.CharField(max_length=20, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ledger_payment",
                    models.OneToOneField(
                        to="billing.ledgerpayment",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="legacy_record",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name": "Legacy Payment",
                "verbose_name_plural": "Legacy Payments",
                "indexes": [
                    models.Index(fields=["student_id"], name="billing_leg_student_177e89_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="chk_legacy_payment_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceiptNumber",
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
                ("or_number", models.CharField(max_length=50, unique=True)),
                (
                    "source",
                    models.CharField(
                        max_length=10,
                        choices=[
                            ("LEDGER", "Ledger payment"),
                            ("LEGACY", "Legacy payment log"),
                        ],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name": "Receipt Number",
                "verbose_name_plural": "Receipt Numbers",
            },
        ),
    ]
