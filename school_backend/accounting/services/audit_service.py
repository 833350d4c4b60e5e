# accounting/services/audit_service.py

"""
AUDIT SERVICE (BEST-EFFORT)

Financial operations call record_audit_event() after their write.

Delivery model (outbox):
1) An AuditEvent row is written inside a savepoint of the caller's transaction
2) After commit, the row is handed to the configured sink
   (settings.ACCOUNTING_AUDIT_SINK, default LoggingAuditSink)
3) Undelivered rows are re-sent by dispatch_pending_audit_events

Hard rule:
- Audit failures are logged as warnings and swallowed.
  They never fail or roll back the financial write.
"""

from __future__ import annotations

import json
import logging

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from accounting.models.audit import AuditEvent

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")

DEFAULT_AUDIT_SINK = "accounting.services.audit_service.LoggingAuditSink"


class AuditSink:
    """Receives delivered audit events. Must be idempotent per event id."""

    def deliver(self, event: AuditEvent) -> None:
        raise NotImplementedError


class LoggingAuditSink(AuditSink):
    def deliver(self, event: AuditEvent) -> None:
        audit_logger.info(
            event.action,
            extra={
                "audit_event_id": event.pk,
                "actor_id": event.actor_id,
                "entity_type": event.entity_type,
                "entity_id": event.entity_id,
                "severity": event.severity,
                "summary": event.summary,
            },
        )


def get_audit_sink() -> AuditSink:
    path = getattr(settings, "ACCOUNTING_AUDIT_SINK", "") or DEFAULT_AUDIT_SINK
    return import_string(path)()


def _json_safe(summary: dict | None) -> dict:
    return json.loads(json.dumps(summary or {}, cls=DjangoJSONEncoder))


def dispatch_event(event: AuditEvent) -> bool:
    try:
        get_audit_sink().deliver(event)
        event.mark_dispatched(timezone.now())
        return True
    except Exception:
        logger.warning(
            "Audit event delivery failed; it stays queued",
            exc_info=True,
            extra={"audit_event_id": event.pk, "action": event.action},
        )
        return False


def dispatch_pending_events(*, limit: int = 500) -> int:
    delivered = 0
    pending = AuditEvent.objects.filter(dispatched_at__isnull=True).order_by(
        "created_at", "id"
    )[:limit]
    for event in pending:
        if dispatch_event(event):
            delivered += 1
    return delivered


def record_audit_event(
    *,
    action: str,
    entity_type: str,
    entity_id,
    actor_id=None,
    summary: dict | None = None,
    severity: str = AuditEvent.SEVERITY_INFO,
) -> AuditEvent | None:
    try:
        with transaction.atomic():
            event = AuditEvent.objects.create(
                action=action,
                actor_id=str(actor_id) if actor_id is not None else None,
                entity_type=entity_type,
                entity_id=str(entity_id or ""),
                summary=_json_safe(summary),
                severity=severity,
            )
    except Exception:
        logger.warning(
            "Failed to record audit event",
            exc_info=True,
            extra={
                "action": action,
                "entity_type": entity_type,
                "entity_id": str(entity_id or ""),
            },
        )
        return None

    transaction.on_commit(lambda: dispatch_event(event))
    return event
