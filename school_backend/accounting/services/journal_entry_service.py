# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry
- Create JournalEntryLine
- Allocate entry numbers (JE-<year>-<NNN>)
- Enforce debit == credit
- Guarantee atomicity (header + lines in one transaction)
- Enforce idempotency via system references (prevents double-posting)
- Enforce period locks (no posting into closed periods)

Everything else (payments, expenses, payroll, manual entries) must pass through here.

Entry numbers:
- next_entry_number() increments a per-year JournalSequence row under
  select_for_update, so concurrent writers never share a number.
- scan_next_entry_number() derives the number from existing rows. It seeds a
  year's sequence the first time and is kept for imports.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import ENTRY_NUMBER_RE, JournalEntry, JournalEntryLine
from accounting.models.sequence import JournalSequence
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    JournalEntryNotFoundError,
)
from accounting.services.period_lock import assert_period_open

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
BALANCE_TOLERANCE = Decimal("0.01")
MIN_LINES = 2


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise JournalEntryCreationError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_date(value: date | datetime | None) -> date:
    if value is None:
        return timezone.localdate()
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, timezone.get_current_timezone())
        return timezone.localtime(value).date()
    return value


def _normalize_reference_id(reference_id) -> str | None:
    if reference_id is None:
        return None
    rid = str(reference_id).strip()
    return rid or None


# ------------------------------------------------------------
# ENTRY NUMBERS
# ------------------------------------------------------------


def format_entry_number(year: int, sequence: int) -> str:
    return f"JE-{year}-{sequence:03d}"


def _highest_existing_sequence(year: int) -> int:
    highest = 0
    numbers = JournalEntry.objects.filter(
        entry_number__startswith=f"JE-{year}-"
    ).values_list("entry_number", flat=True)
    for number in numbers:
        match = ENTRY_NUMBER_RE.match(number or "")
        if match:
            highest = max(highest, int(match.group(2)))
    return highest


def scan_next_entry_number(year: int) -> str:
    """Next number from a scan of existing rows (not safe under concurrent writers)."""
    return format_entry_number(year, _highest_existing_sequence(year) + 1)


@transaction.atomic
def next_entry_number(entry_date: date | datetime | None = None) -> str:
    year = _to_date(entry_date).year

    try:
        sequence = JournalSequence.objects.select_for_update().get(year=year)
    except JournalSequence.DoesNotExist:
        # First number of the year: seed the counter from existing rows
        try:
            with transaction.atomic():
                sequence = JournalSequence.objects.create(
                    year=year, last_value=_highest_existing_sequence(year)
                )
        except IntegrityError:
            sequence = JournalSequence.objects.select_for_update().get(year=year)

    candidate = sequence.last_value + 1
    # Imported rows may already hold numbers past the stored counter.
    while JournalEntry.objects.filter(
        entry_number=format_entry_number(year, candidate)
    ).exists():
        candidate += 1

    sequence.last_value = candidate
    sequence.save(update_fields=["last_value", "updated_at"])
    return format_entry_number(year, candidate)


# ------------------------------------------------------------
# LINE VALIDATION
# ------------------------------------------------------------


def _resolve_line_account(line: dict, index: int) -> Account:
    account = line.get("account")
    if isinstance(account, Account):
        return account

    account_id = line.get("account_id")
    account_code = line.get("account_code")

    found = None
    if account_id is not None:
        found = Account.objects.filter(pk=account_id).first()
    elif account_code:
        found = Account.objects.filter(code=str(account_code).strip()).first()

    if found is None:
        raise JournalEntryCreationError(
            f"Line {index}: account {account_id or account_code!r} does not exist"
        )
    return found


def normalize_lines(lines) -> list[dict]:
    """
    Validate raw lines and return them with resolved accounts and Decimal amounts.

    Accepted keys per line: account | account_id | account_code, debit, credit,
    description.
    """
    if not lines or len(lines) < MIN_LINES:
        raise JournalEntryCreationError(
            f"Journal entry must have at least {MIN_LINES} lines"
        )

    normalized: list[dict] = []
    for index, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each line must be an object/dict")

        account = _resolve_line_account(line, index)
        if not account.is_active:
            raise JournalEntryCreationError(
                f"Line {index}: account {account.code} is inactive"
            )

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError(
                f"Line {index}: debit or credit cannot be negative"
            )
        if debit > 0 and credit > 0:
            raise JournalEntryCreationError(
                f"Line {index}: a line cannot have both debit and credit"
            )

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "description": (line.get("description") or "").strip()[:255],
            }
        )

    return normalized


def sum_lines(lines: list[dict]) -> tuple[Decimal, Decimal]:
    total_debit = sum((line["debit"] for line in lines), Decimal("0.00"))
    total_credit = sum((line["credit"] for line in lines), Decimal("0.00"))
    return (
        total_debit.quantize(TWOPLACES, rounding=ROUND_HALF_UP),
        total_credit.quantize(TWOPLACES, rounding=ROUND_HALF_UP),
    )


def assert_balanced(total_debit: Decimal, total_credit: Decimal) -> None:
    difference = abs(total_debit - total_credit)
    if difference > BALANCE_TOLERANCE:
        raise JournalEntryCreationError(
            f"Journal entry is not balanced. Debits: {total_debit}, "
            f"Credits: {total_credit}. Difference: {difference}"
        )
    if total_debit <= 0 and total_credit <= 0:
        raise JournalEntryCreationError("Journal entry must carry a non-zero amount")


# ------------------------------------------------------------
# CREATION
# ------------------------------------------------------------


def _existing_system_entry(reference_type: str, reference_id: str | None):
    if reference_type not in JournalEntry.SYSTEM_REFERENCE_TYPES or not reference_id:
        return None
    return JournalEntry.objects.filter(
        reference_type=reference_type, reference_id=reference_id
    ).first()


@transaction.atomic
def create_journal_entry(
    *,
    description: str,
    lines: list,
    entry_date: date | datetime | None = None,
    reference_type: str = JournalEntry.REF_MANUAL,
    reference_id=None,
    status: str = JournalEntry.STATUS_DRAFT,
    created_by=None,
    approved_by=None,
) -> JournalEntry:
    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    if status not in (JournalEntry.STATUS_DRAFT, JournalEntry.STATUS_POSTED):
        raise JournalEntryCreationError(f"Cannot create an entry in status {status}")

    normalized = normalize_lines(lines)
    total_debit, total_credit = sum_lines(normalized)
    assert_balanced(total_debit, total_credit)

    entry_day = _to_date(entry_date)
    assert_period_open(entry_date=entry_day)

    reference_id = _normalize_reference_id(reference_id)

    # Clear error before DB constraint race handling
    if _existing_system_entry(reference_type, reference_id) is not None:
        raise IdempotencyError(
            f"Journal entry already exists for {reference_type}:{reference_id}"
        )

    entry = JournalEntry(
        entry_number=next_entry_number(entry_day),
        entry_date=entry_day,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        status=status,
        created_by=str(created_by) if created_by is not None else None,
        approved_by=str(approved_by) if approved_by is not None else None,
        approved_at=timezone.now() if status == JournalEntry.STATUS_POSTED else None,
        total_debit=total_debit,
        total_credit=total_credit,
    )

    try:
        with transaction.atomic():
            entry.save()
    except (IntegrityError, ValidationError) as exc:
        if _existing_system_entry(reference_type, reference_id) is not None:
            raise IdempotencyError(
                f"Journal entry already exists for {reference_type}:{reference_id}"
            ) from exc
        raise JournalEntryCreationError(
            f"Failed to create journal entry: {exc}"
        ) from exc

    JournalEntryLine.objects.bulk_create(
        [
            JournalEntryLine(
                entry=entry,
                account=line["account"],
                line_number=number,
                debit=line["debit"],
                credit=line["credit"],
                description=line["description"],
            )
            for number, line in enumerate(normalized, start=1)
        ]
    )

    logger.info(
        "Journal entry created",
        extra={
            "entry_number": entry.entry_number,
            "status": entry.status,
            "reference_type": reference_type,
            "reference_id": reference_id,
            "total_debit": str(total_debit),
            "total_credit": str(total_credit),
        },
    )
    return entry


# ------------------------------------------------------------
# READS
# ------------------------------------------------------------


def get_entry(entry_id) -> JournalEntry:
    try:
        return JournalEntry.objects.prefetch_related("lines__account").get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise JournalEntryNotFoundError(f"Journal entry {entry_id!r} not found") from exc


def list_entries(*, status: str | None = None, reference_type: str | None = None):
    qs = JournalEntry.objects.prefetch_related("lines__account")
    if status:
        qs = qs.filter(status=status)
    if reference_type:
        qs = qs.filter(reference_type=reference_type)
    return qs


def line_totals(entry: JournalEntry) -> tuple[Decimal, Decimal]:
    """Totals recomputed from the stored lines (never from the header cache)."""
    aggregates = entry.lines.aggregate(
        debit_total=Coalesce(Sum("debit"), Decimal("0.00")),
        credit_total=Coalesce(Sum("credit"), Decimal("0.00")),
    )
    return _money(aggregates["debit_total"]), _money(aggregates["credit_total"])
