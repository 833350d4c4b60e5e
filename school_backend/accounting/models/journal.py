# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Guarantees:
- entry_number is unique and follows JE-<year>-<NNN>
- Status moves DRAFT -> POSTED or DRAFT -> REJECTED, never back
- POSTED and REJECTED entries are immutable and non-deletable
- System references (payment/expense/payroll) are unique, which makes
  system postings idempotent at the storage layer
"""

from __future__ import annotations

import re
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

ENTRY_NUMBER_RE = re.compile(r"^JE-(\d{4})-(\d{3,})$")


class JournalEntry(models.Model):
    STATUS_DRAFT = "DRAFT"
    STATUS_POSTED = "POSTED"
    STATUS_REJECTED = "REJECTED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
        (STATUS_REJECTED, "Rejected"),
    ]

    FINAL_STATUSES = frozenset({STATUS_POSTED, STATUS_REJECTED})

    REF_PAYMENT = "PAYMENT"
    REF_EXPENSE = "EXPENSE"
    REF_PAYROLL = "PAYROLL"
    REF_MANUAL = "MANUAL"

    REFERENCE_TYPES = [
        (REF_PAYMENT, "Payment"),
        (REF_EXPENSE, "Expense"),
        (REF_PAYROLL, "Payroll"),
        (REF_MANUAL, "Manual"),
    ]

    SYSTEM_REFERENCE_TYPES = (REF_PAYMENT, REF_EXPENSE, REF_PAYROLL)

    entry_number = models.CharField(max_length=20, unique=True)

    entry_date = models.DateField(
        default=timezone.localdate,
        help_text="Accounting effective date",
    )

    description = models.TextField(help_text="Narrative description of the journal entry")

    reference_type = models.CharField(
        max_length=10,
        choices=REFERENCE_TYPES,
        default=REF_MANUAL,
    )

    reference_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Id of the originating business event (payment, expense, payroll)",
    )

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
    )

    created_by = models.CharField(max_length=64, blank=True, null=True)
    approved_by = models.CharField(
        max_length=64,
        blank=True,
        null=True,
        help_text="Approver (or rejecter) actor id",
    )
    approved_at = models.DateTimeField(blank=True, null=True)

    total_debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp when the journal entry was created",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-entry_date", "-created_at"]
        indexes = [
            models.Index(fields=["entry_date"]),
            models.Index(fields=["status"]),
            models.Index(fields=["status", "entry_date"]),
            models.Index(fields=["reference_type", "reference_id"]),
            models.Index(fields=["created_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["reference_type", "reference_id"],
                condition=Q(reference_type__in=["PAYMENT", "EXPENSE", "PAYROLL"])
                & Q(reference_id__isnull=False),
                name="uniq_journal_system_reference",
            ),
            models.CheckConstraint(
                condition=Q(status__in=["DRAFT", "POSTED", "REJECTED"]),
                name="chk_journal_status_valid",
            ),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"{self.entry_number} – {self.entry_date} ({self.status})"

    @property
    def is_draft(self) -> bool:
        return self.status == self.STATUS_DRAFT

    @property
    def is_posted(self) -> bool:
        return self.status == self.STATUS_POSTED

    def _stored_status(self) -> str | None:
        if not self.pk:
            return None
        return (
            type(self)
            .objects.filter(pk=self.pk)
            .values_list("status", flat=True)
            .first()
        )

    def clean(self):
        if self.reference_id is not None:
            ref = str(self.reference_id).strip()
            self.reference_id = ref or None

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        self.entry_number = (self.entry_number or "").strip()
        if not ENTRY_NUMBER_RE.match(self.entry_number):
            raise ValidationError(
                {"entry_number": "Entry number must look like JE-<year>-<NNN>"}
            )

    def save(self, *args, **kwargs):
        previous = self._stored_status()
        if previous in self.FINAL_STATUSES:
            raise ValidationError(
                f"Journal entry {self.entry_number} is {previous.lower()} and immutable"
            )

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self._stored_status() in self.FINAL_STATUSES:
            raise ValidationError(
                "Posted or rejected journal entries cannot be deleted"
            )
        return super().delete(*args, **kwargs)


class JournalEntryLine(models.Model):
    """
    One debit or credit line of a journal entry.

    Lines are written in bulk by the journal engine and never change once
    the parent entry has left DRAFT.
    """

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    line_number = models.PositiveIntegerField()

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["entry", "line_number"]
        verbose_name = "Journal Entry Line"
        verbose_name_plural = "Journal Entry Lines"
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["entry"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["entry", "line_number"],
                name="uniq_journal_line_number",
            ),
            models.CheckConstraint(
                condition=Q(line_number__gte=1),
                name="chk_journal_line_number_positive",
            ),
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_journal_line_non_negative",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__gt=0) & Q(credit__gt=0)),
                name="chk_journal_line_one_side",
            ),
        ]

    def __str__(self):
        side = f"Dr {self.debit}" if self.debit else f"Cr {self.credit}"
        return f"{self.entry_id}#{self.line_number} {side} → {self.account_id}"

    def _entry_is_final(self) -> bool:
        if not self.entry_id:
            return False
        status = (
            JournalEntry.objects.filter(pk=self.entry_id)
            .values_list("status", flat=True)
            .first()
        )
        return status in JournalEntry.FINAL_STATUSES

    def save(self, *args, **kwargs):
        if self._entry_is_final():
            raise ValidationError("Lines of a posted or rejected entry are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self._entry_is_final():
            raise ValidationError("Lines of a posted or rejected entry cannot be deleted")
        return super().delete(*args, **kwargs)
