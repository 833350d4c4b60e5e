# billing/models/receipt.py

"""
OR NUMBER REGISTRY

Every official receipt number issued by any payment store is inserted
here in the same transaction as the payment row. The unique index makes
OR numbers globally unique across the ledger payments and the legacy
payment log, even under concurrent writers.
"""

from __future__ import annotations

from django.db import models


class ReceiptNumber(models.Model):
    SOURCE_LEDGER = "LEDGER"
    SOURCE_LEGACY = "LEGACY"

    SOURCES = [
        (SOURCE_LEDGER, "Ledger payment"),
        (SOURCE_LEGACY, "Legacy payment log"),
    ]

    or_number = models.CharField(max_length=50, unique=True)
    source = models.CharField(max_length=10, choices=SOURCES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Receipt Number"
        verbose_name_plural = "Receipt Numbers"

    def __str__(self):
        return f"{self.or_number} ({self.source})"
