# accounting/models/sequence.py

"""
JOURNAL SEQUENCE

One row per calendar year holding the last issued journal entry sequence.
The journal engine locks the row (select_for_update) before incrementing,
so concurrent writers never receive the same number.
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q


class JournalSequence(models.Model):
    year = models.PositiveIntegerField(unique=True)
    last_value = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year"]
        verbose_name = "Journal Sequence"
        verbose_name_plural = "Journal Sequences"
        constraints = [
            models.CheckConstraint(
                condition=Q(year__gte=1900),
                name="chk_journal_sequence_year_sane",
            ),
        ]

    def __str__(self):
        return f"JE-{self.year} @ {self.last_value}"
