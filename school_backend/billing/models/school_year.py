# billing/models/school_year.py

from __future__ import annotations

import re

from django.core.exceptions import ValidationError
from django.db import models

SCHOOL_YEAR_RE = re.compile(r"^(\d{4})-(\d{4})$")


class SchoolYear(models.Model):
    """
    A school year such as "2024-2025".

    Billing only happens for the school year that is both active and open.
    """

    name = models.CharField(max_length=20, unique=True)
    is_active = models.BooleanField(default=False)
    is_open = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-name"]
        verbose_name = "School Year"
        verbose_name_plural = "School Years"

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        match = SCHOOL_YEAR_RE.match(self.name)
        if not match:
            raise ValidationError({"name": "School year must look like 2024-2025"})
        start, end = (int(g) for g in match.groups())
        if end != start + 1:
            raise ValidationError({"name": "School year must span consecutive years"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
