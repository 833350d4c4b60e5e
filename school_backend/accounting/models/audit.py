# accounting/models/audit.py

"""
======================================================
PATH: accounting/models/audit.py
======================================================
AUDIT EVENT (OUTBOX)

Financial services write one row per auditable action. Rows are delivered
to the configured audit sink after the surrounding transaction commits;
dispatched_at stays empty until a sink accepted the event, so delivery can
be retried (at-least-once).

Audit guarantees:
- Immutable once created, except for the one-time dispatched_at stamp
- Non-deletable
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models


class AuditEvent(models.Model):
    SEVERITY_INFO = "INFO"
    SEVERITY_WARNING = "WARNING"
    SEVERITY_CRITICAL = "CRITICAL"

    SEVERITY_CHOICES = [
        (SEVERITY_INFO, "Info"),
        (SEVERITY_WARNING, "Warning"),
        (SEVERITY_CRITICAL, "Critical"),
    ]

    action = models.CharField(max_length=100)
    actor_id = models.CharField(max_length=64, blank=True, null=True)
    entity_type = models.CharField(max_length=100)
    entity_id = models.CharField(max_length=100, blank=True, default="")
    summary = models.JSONField(default=dict, blank=True)
    severity = models.CharField(
        max_length=10,
        choices=SEVERITY_CHOICES,
        default=SEVERITY_INFO,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    dispatched_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["dispatched_at"]),
        ]
        verbose_name = "Audit Event"
        verbose_name_plural = "Audit Events"

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id} by {self.actor_id or 'system'}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError(
                "AuditEvent records are immutable; use mark_dispatched()"
            )
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("AuditEvent records cannot be deleted")

    def mark_dispatched(self, when) -> None:
        type(self).objects.filter(pk=self.pk, dispatched_at__isnull=True).update(
            dispatched_at=when
        )
        self.dispatched_at = when
