# billing/models/fee_schedule.py

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.db.models import Q

# Canonical grade-level codes shared by fee schedules and student ledgers.
GRADE_LEVEL_CHOICES = [
    (-1, "Nursery"),
    (0, "Kinder"),
] + [(n, f"Grade {n}") for n in range(1, 13)]


class FeeSchedule(models.Model):
    """
    Fees billed once per school year for one grade level.
    """

    grade_level = models.SmallIntegerField(choices=GRADE_LEVEL_CHOICES, unique=True)

    tuition_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    misc_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    other_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["grade_level"]
        verbose_name = "Fee Schedule"
        verbose_name_plural = "Fee Schedules"
        constraints = [
            models.CheckConstraint(
                condition=Q(tuition_fee__gte=0) & Q(misc_fee__gte=0) & Q(other_fee__gte=0),
                name="chk_fee_schedule_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.get_grade_level_display()} – {self.total_fee}"

    @property
    def total_fee(self) -> Decimal:
        return (self.tuition_fee or 0) + (self.misc_fee or 0) + (self.other_fee or 0)
