# accounting/services/manual_entry_service.py

"""
MANUAL JOURNAL ENTRY WORKFLOW

Draft -> Posted (approve) or Draft -> Rejected (reject).

Rules:
- Manual entries are always created as DRAFT, never auto-posted
- Approval re-checks the balance from the stored lines
- Approval re-checks the period lock (a period may have closed meanwhile)
- Rejection requires a reason
- The approver/rejecter identity is supplied by the caller (already validated)
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.audit_service import record_audit_event
from accounting.services.exceptions import (
    AccountingValidationError,
    InvalidStateTransition,
    JournalEntryNotFoundError,
)
from accounting.services.journal_entry_service import (
    assert_balanced,
    create_journal_entry,
    line_totals,
)
from accounting.services.period_lock import assert_period_open

logger = logging.getLogger(__name__)


def create_manual_entry(
    *,
    entry_date: date,
    description: str,
    lines: list,
    actor_id,
    notes: str | None = None,
) -> JournalEntry:
    notes = (notes or "").strip()
    if notes:
        description = f"{(description or '').strip()} [Notes: {notes}]"

    entry = create_journal_entry(
        description=description,
        lines=lines,
        entry_date=entry_date,
        reference_type=JournalEntry.REF_MANUAL,
        status=JournalEntry.STATUS_DRAFT,
        created_by=actor_id,
    )

    record_audit_event(
        action="journal_entry.manual_created",
        actor_id=actor_id,
        entity_type="JournalEntry",
        entity_id=entry.pk,
        summary={"entry_number": entry.entry_number, "total_debit": entry.total_debit},
    )
    return entry


def _lock_draft(entry_id) -> JournalEntry:
    try:
        entry = JournalEntry.objects.select_for_update().get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise JournalEntryNotFoundError(f"Journal entry {entry_id!r} not found") from exc

    if entry.status != JournalEntry.STATUS_DRAFT:
        raise InvalidStateTransition(
            f"Journal entry {entry.entry_number} is {entry.get_status_display()}; "
            "only draft entries can be approved or rejected"
        )
    return entry


@transaction.atomic
def approve_entry(entry_id, *, approver_id, notes: str | None = None) -> JournalEntry:
    entry = _lock_draft(entry_id)

    total_debit, total_credit = line_totals(entry)
    assert_balanced(total_debit, total_credit)
    assert_period_open(entry_date=entry.entry_date)

    notes = (notes or "").strip()
    if notes:
        entry.description = f"{entry.description} [Approved: {notes}]"

    entry.status = JournalEntry.STATUS_POSTED
    entry.approved_by = str(approver_id) if approver_id is not None else None
    entry.approved_at = timezone.now()
    entry.total_debit = total_debit
    entry.total_credit = total_credit
    entry.save()

    logger.info(
        "Journal entry approved",
        extra={"entry_number": entry.entry_number, "approver_id": approver_id},
    )
    record_audit_event(
        action="journal_entry.approved",
        actor_id=approver_id,
        entity_type="JournalEntry",
        entity_id=entry.pk,
        summary={"entry_number": entry.entry_number, "notes": notes},
    )
    return entry


@transaction.atomic
def reject_entry(entry_id, *, rejecter_id, reason: str) -> JournalEntry:
    reason = (reason or "").strip()
    if not reason:
        raise AccountingValidationError("A rejection reason is required")

    entry = _lock_draft(entry_id)

    entry.description = f"{entry.description} [Rejected: {reason}]"
    entry.status = JournalEntry.STATUS_REJECTED
    entry.approved_by = str(rejecter_id) if rejecter_id is not None else None
    entry.approved_at = timezone.now()
    entry.save()

    logger.info(
        "Journal entry rejected",
        extra={"entry_number": entry.entry_number, "rejecter_id": rejecter_id},
    )
    record_audit_event(
        action="journal_entry.rejected",
        actor_id=rejecter_id,
        entity_type="JournalEntry",
        entity_id=entry.pk,
        summary={"entry_number": entry.entry_number, "reason": reason},
        severity="WARNING",
    )
    return entry


def list_pending_entries() -> list[dict]:
    """Draft entries, oldest first, with lines resolved for human review."""
    entries = (
        JournalEntry.objects.filter(status=JournalEntry.STATUS_DRAFT)
        .prefetch_related("lines__account")
        .order_by("created_at", "id")
    )

    pending = []
    for entry in entries:
        lines = [
            {
                "line_number": line.line_number,
                "account_id": line.account_id,
                "account_code": line.account.code,
                "account_name": line.account.name,
                "debit": line.debit,
                "credit": line.credit,
                "description": line.description,
            }
            for line in entry.lines.all()
        ]
        pending.append(
            {
                "id": entry.pk,
                "entry_number": entry.entry_number,
                "entry_date": entry.entry_date,
                "description": entry.description,
                "created_by": entry.created_by,
                "created_at": entry.created_at,
                "total_debit": sum((line["debit"] for line in lines), Decimal("0.00")),
                "total_credit": sum((line["credit"] for line in lines), Decimal("0.00")),
                "lines": lines,
            }
        )
    return pending
