# billing/models/legacy_payment.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from billing.models.ledger import LedgerPayment


class LegacyPayment(models.Model):
    """
    Flat payment log kept alongside the ledgers for older reports.

    A row mirrors a LedgerPayment (same OR number, linked) or records an
    old receipt that never had a ledger.
    """

    student_id = models.CharField(max_length=64)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_method = models.CharField(max_length=30)
    or_number = models.CharField(max_length=50, unique=True)
    processed_by = models.CharField(max_length=64, blank=True, null=True)
    school_year = models.CharField(max_length=20, blank=True, default="")

    ledger_payment = models.OneToOneField(
        LedgerPayment,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="legacy_record",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Legacy Payment"
        verbose_name_plural = "Legacy Payments"
        indexes = [
            models.Index(fields=["student_id"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_legacy_payment_positive",
            ),
        ]

    def __str__(self):
        return f"Legacy OR {self.or_number} – {self.amount}"

    def clean(self):
        self.or_number = (self.or_number or "").strip()
        if not self.or_number:
            raise ValidationError({"or_number": "OR number is required"})
        if self.ledger_payment_id and self.ledger_payment.or_number != self.or_number:
            raise ValidationError(
                {"or_number": "A mirrored payment must keep the ledger payment's OR number"}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
