# billing/models/ledger.py

"""
======================================================
PATH: billing/models/ledger.py
======================================================
STUDENT LEDGER MODELS

StudentLedger holds denormalized totals; LedgerCharge and LedgerPayment
rows are the source of truth.

Guarantees:
- One ledger per (student_id, school_year)
- total_charges / total_payments / balance / status are written only by
  billing.services.ledger_service.recalculate_totals
- Charges are positive, discounts negative
- A discount configuration applies at most once per ledger
- Payments are positive and carry a globally unique OR number
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from billing.models.discount import Discount
from billing.models.fee_schedule import GRADE_LEVEL_CHOICES


class StudentLedger(models.Model):
    STATUS_UNPAID = "UNPAID"
    STATUS_PARTIALLY_PAID = "PARTIALLY_PAID"
    STATUS_FULLY_PAID = "FULLY_PAID"

    STATUS_CHOICES = [
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PARTIALLY_PAID, "Partially Paid"),
        (STATUS_FULLY_PAID, "Fully Paid"),
    ]

    student_id = models.CharField(max_length=64)
    school_year = models.CharField(max_length=20)
    grade_level = models.SmallIntegerField(
        choices=GRADE_LEVEL_CHOICES,
        null=True,
        blank=True,
        help_text="Fixed when the ledger is created; back-filled if missing",
    )

    total_charges = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_payments = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_UNPAID,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-school_year", "student_id"]
        verbose_name = "Student Ledger"
        verbose_name_plural = "Student Ledgers"
        indexes = [
            models.Index(fields=["school_year"]),
            models.Index(fields=["balance"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["student_id", "school_year"],
                name="uniq_student_ledger_per_year",
            ),
        ]

    def __str__(self):
        return f"Ledger {self.student_id} {self.school_year} – {self.balance} ({self.get_status_display()})"

    def clean(self):
        self.student_id = (self.student_id or "").strip()
        self.school_year = (self.school_year or "").strip()
        if not self.student_id:
            raise ValidationError({"student_id": "student_id is required"})
        if not self.school_year:
            raise ValidationError({"school_year": "school_year is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class LedgerCharge(models.Model):
    TYPE_TUITION = "TUITION"
    TYPE_MISC = "MISC"
    TYPE_OTHER = "OTHER"
    TYPE_ADJUSTMENT = "ADJUSTMENT"
    TYPE_LATE_FEE = "LATE_FEE"
    TYPE_DISCOUNT = "DISCOUNT"

    CHARGE_TYPES = [
        (TYPE_TUITION, "Tuition"),
        (TYPE_MISC, "Miscellaneous"),
        (TYPE_OTHER, "Other Fees"),
        (TYPE_ADJUSTMENT, "Adjustment"),
        (TYPE_LATE_FEE, "Late Fee"),
        (TYPE_DISCOUNT, "Discount"),
    ]

    INITIAL_TYPES = (TYPE_TUITION, TYPE_MISC, TYPE_OTHER)

    ledger = models.ForeignKey(
        StudentLedger,
        on_delete=models.CASCADE,
        related_name="charges",
    )

    charge_type = models.CharField(max_length=20, choices=CHARGE_TYPES)
    description = models.CharField(max_length=255, blank=True, default="")

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Positive for charges, negative for discounts",
    )

    discount = models.ForeignKey(
        Discount,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_charges",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["ledger", "created_at", "id"]
        verbose_name = "Ledger Charge"
        verbose_name_plural = "Ledger Charges"
        indexes = [
            models.Index(fields=["ledger", "charge_type"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["ledger", "discount"],
                condition=Q(discount__isnull=False),
                name="uniq_ledger_discount_once",
            ),
            models.CheckConstraint(
                condition=(Q(charge_type="DISCOUNT") & Q(amount__lt=0))
                | (~Q(charge_type="DISCOUNT") & Q(amount__gt=0)),
                name="chk_ledger_charge_sign",
            ),
        ]

    def __str__(self):
        return f"{self.get_charge_type_display()} {self.amount}"

    def clean(self):
        if self.amount is None:
            raise ValidationError({"amount": "amount is required"})
        if self.charge_type == self.TYPE_DISCOUNT and self.amount >= 0:
            raise ValidationError({"amount": "Discounts must be stored as negative amounts"})
        if self.charge_type != self.TYPE_DISCOUNT and self.amount <= 0:
            raise ValidationError({"amount": "Charges must be positive"})
        if self.discount_id and self.charge_type != self.TYPE_DISCOUNT:
            raise ValidationError({"discount": "Only discount charges may link a discount"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class LedgerPayment(models.Model):
    ledger = models.ForeignKey(
        StudentLedger,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    or_number = models.CharField(max_length=50, unique=True)
    payment_method = models.CharField(max_length=30)
    processed_by = models.CharField(max_length=64, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["ledger", "created_at", "id"]
        verbose_name = "Ledger Payment"
        verbose_name_plural = "Ledger Payments"
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_ledger_payment_positive",
            ),
        ]

    def __str__(self):
        return f"OR {self.or_number} – {self.amount}"

    def clean(self):
        self.or_number = (self.or_number or "").strip()
        if not self.or_number:
            raise ValidationError({"or_number": "OR number is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
