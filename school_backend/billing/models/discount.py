# billing/models/discount.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class Discount(models.Model):
    """
    Discount configuration (sibling, scholarship, early-bird...).

    - is_percentage=True: rate_or_value is a percentage of the base amount
    - is_percentage=False: rate_or_value is a fixed amount
    - min_amount / max_amount clamp the computed amount when set
    """

    discount_type = models.CharField(max_length=50)
    discount_name = models.CharField(max_length=100, unique=True)

    rate_or_value = models.DecimalField(max_digits=12, decimal_places=2)
    is_percentage = models.BooleanField(default=True)

    min_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    max_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    description = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["discount_name"]
        verbose_name = "Discount"
        verbose_name_plural = "Discounts"
        constraints = [
            models.CheckConstraint(
                condition=Q(rate_or_value__gte=0),
                name="chk_discount_value_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(min_amount__isnull=True)
                | Q(max_amount__isnull=True)
                | Q(max_amount__gte=F("min_amount")),
                name="chk_discount_max_gte_min",
            ),
        ]

    def __str__(self):
        unit = "%" if self.is_percentage else ""
        return f"{self.discount_name} ({self.rate_or_value}{unit})"

    def clean(self):
        self.discount_type = (self.discount_type or "").strip()
        self.discount_name = (self.discount_name or "").strip()
        if not self.discount_name:
            raise ValidationError({"discount_name": "Discount name is required"})
        if self.is_percentage and self.rate_or_value is not None and self.rate_or_value > Decimal("100"):
            raise ValidationError({"rate_or_value": "A percentage cannot exceed 100"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
