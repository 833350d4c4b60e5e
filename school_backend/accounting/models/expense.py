# accounting/models/expense.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Expense(models.Model):
    """
    School expense (business event), posted to the books via the journal engine.

    Rule:
    - Only APPROVED expenses are posted
    - The category is free text; the posting layer maps it to an expense account
    """

    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    PAYMENT_CASH = "cash"
    PAYMENT_BANK = "bank"
    PAYMENT_CHECK = "check"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_BANK, "Bank Transfer"),
        (PAYMENT_CHECK, "Check"),
    ]

    expense_code = models.CharField(max_length=30, unique=True)
    category = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True, default="")

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    expense_date = models.DateField(default=timezone.localdate)

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHODS,
        default=PAYMENT_CASH,
    )

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    approved_by = models.CharField(max_length=64, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        indexes = [
            models.Index(fields=["expense_date"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_expense_amount_positive",
            )
        ]

    def __str__(self):
        return f"{self.expense_code} - {self.amount} ({self.category})"

    def clean(self):
        self.expense_code = (self.expense_code or "").strip()
        self.category = (self.category or "").strip()
        if not self.expense_code:
            raise ValidationError("expense_code is required")
        if not self.category:
            raise ValidationError("category is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
