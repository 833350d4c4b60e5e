# accounting/models/period.py

"""
======================================================
PATH: accounting/models/period.py
======================================================
ACCOUNTING PERIOD MODEL

One calendar month of the books.

Guarantees:
- (year, month) is unique
- name and date range are derived from (year, month)
- closed periods carry who closed them and when
"""

from __future__ import annotations

import calendar
from datetime import date

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class AccountingPeriod(models.Model):
    year = models.PositiveIntegerField()
    month = models.PositiveSmallIntegerField()

    name = models.CharField(max_length=30)
    start_date = models.DateField()
    end_date = models.DateField()

    is_closed = models.BooleanField(default=False)
    closed_by = models.CharField(max_length=64, blank=True, null=True)
    closed_at = models.DateTimeField(blank=True, null=True)
    closing_notes = models.TextField(blank=True, default="")

    reopened_by = models.CharField(max_length=64, blank=True, null=True)
    reopened_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year", "-month"]
        indexes = [
            models.Index(fields=["start_date", "end_date"]),
            models.Index(fields=["is_closed"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["year", "month"],
                name="uniq_accounting_period_year_month",
            ),
            models.CheckConstraint(
                condition=Q(month__gte=1) & Q(month__lte=12),
                name="chk_accounting_period_month_range",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_accounting_period_end_gte_start",
            ),
        ]
        verbose_name = "Accounting Period"
        verbose_name_plural = "Accounting Periods"

    def __str__(self):
        state = "closed" if self.is_closed else "open"
        return f"{self.name} ({state})"

    @staticmethod
    def bounds_for(year: int, month: int) -> tuple[date, date]:
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)

    def clean(self):
        if not self.month or not 1 <= self.month <= 12:
            raise ValidationError({"month": "month must be between 1 and 12"})

        start, end = self.bounds_for(self.year, self.month)
        self.start_date = start
        self.end_date = end
        self.name = start.strftime("%B %Y")

        if self.is_closed and not self.closed_at:
            raise ValidationError("closed_at is required for a closed period")

    def save(self, *args, **kwargs):
        if self.year and self.month and 1 <= self.month <= 12:
            self.start_date, self.end_date = self.bounds_for(self.year, self.month)
            self.name = self.start_date.strftime("%B %Y")
        self.full_clean()
        return super().save(*args, **kwargs)
