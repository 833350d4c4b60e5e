# billing/services/payment_service.py

"""
STUDENT PAYMENT ORCHESTRATOR

Cashier-facing flow for one official receipt:

1) Validate amount and OR number
2) Pick the ledger: the most recent earlier school year with a balance is settled first,
   otherwise the current-year ledger (created on demand)
3) Cap the amount at that ledger's balance
4) Record the ledger payment and its legacy log mirror (same OR number)
5) Post the journal entry (Dr Cash / Cr Tuition Revenue)

Step 5 is not fatal: a posting failure is logged and the payment stands.
The caller can re-post later with accounting.services.posting.post_payment_entry.

pay_ledger() runs steps 4 and 5 for a ledger chosen by the caller, without
the cap: paying more than that ledger's balance is refused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import post_payment_entry
from billing.models.ledger import LedgerPayment, StudentLedger
from billing.models.legacy_payment import LegacyPayment
from billing.models.receipt import ReceiptNumber
from billing.services import ledger_service
from billing.services.exceptions import (
    BillingValidationError,
    PaymentExceedsBalanceError,
)
from billing.services.providers import get_school_year_resolver

logger = logging.getLogger("payments")


@dataclass(frozen=True)
class PaymentResult:
    ledger: StudentLedger
    payment: LedgerPayment
    legacy_payment: LegacyPayment
    journal_entry: JournalEntry | None
    applied_amount: Decimal
    unapplied_amount: Decimal


def _target_ledger(student_id: str) -> StudentLedger:
    current_year = get_school_year_resolver().get_active_school_year()

    previous = ledger_service.get_previous_balance_ledger(
        student_id, excluding_year=current_year
    )
    if previous is not None:
        ledger = ledger_service.ensure_consistent(previous.pk)
        if ledger.balance > 0:
            return ledger

    return ledger_service.get_or_create_for_current_year(student_id)


@transaction.atomic
def process_payment(
    *,
    student_id,
    amount,
    or_number: str,
    payment_method: str,
    processed_by=None,
) -> PaymentResult:
    requested = ledger_service.positive_amount(amount, "Payment amount")
    or_number = ledger_service.clean_or_number(or_number)

    logger.info(
        "Processing student payment",
        extra={
            "student_id": student_id,
            "or_number": or_number,
            "amount": str(requested),
            "processed_by": processed_by,
        },
    )

    ledger = _target_ledger(student_id)
    if ledger.balance <= 0:
        raise PaymentExceedsBalanceError(
            f"Student {student_id} has no outstanding balance for {ledger.school_year}."
        )

    applied = min(requested, ledger.balance)

    return _record(
        ledger,
        amount=applied,
        requested=requested,
        or_number=or_number,
        payment_method=payment_method,
        processed_by=processed_by,
    )


@transaction.atomic
def pay_ledger(
    ledger_id,
    *,
    amount,
    or_number: str,
    payment_method: str,
    processed_by=None,
) -> PaymentResult:
    """
    Payment against one specific ledger. The amount is not capped: more
    than the balance raises PaymentExceedsBalanceError. Otherwise the same
    legacy mirror and journal posting as process_payment.
    """
    amount = ledger_service.positive_amount(amount, "Payment amount")
    ledger = ledger_service.get_ledger(ledger_id)

    return _record(
        ledger,
        amount=amount,
        requested=amount,
        or_number=or_number,
        payment_method=payment_method,
        processed_by=processed_by,
    )


def _record(
    ledger: StudentLedger,
    *,
    amount: Decimal,
    requested: Decimal,
    or_number: str,
    payment_method: str,
    processed_by,
) -> PaymentResult:
    payment = ledger_service.add_payment(
        ledger.pk,
        amount=amount,
        or_number=or_number,
        payment_method=payment_method,
        processed_by=processed_by,
    )

    legacy = LegacyPayment.objects.create(
        student_id=ledger.student_id,
        amount=amount,
        payment_method=payment.payment_method,
        or_number=payment.or_number,
        processed_by=payment.processed_by,
        school_year=ledger.school_year,
        ledger_payment=payment,
    )

    journal_entry = None
    try:
        journal_entry = post_payment_entry(payment, actor_id=processed_by)
    except AccountingServiceError:
        logger.exception(
            "Journal posting failed for student payment; payment kept",
            extra={"or_number": payment.or_number, "ledger_id": ledger.pk},
        )

    ledger.refresh_from_db()
    return PaymentResult(
        ledger=ledger,
        payment=payment,
        legacy_payment=legacy,
        journal_entry=journal_entry,
        applied_amount=amount,
        unapplied_amount=requested - amount,
    )


@transaction.atomic
def record_legacy_payment(
    *,
    student_id,
    amount,
    or_number: str,
    payment_method: str,
    school_year: str = "",
    processed_by=None,
) -> LegacyPayment:
    """Log a receipt that has no ledger (old records, imports)."""
    amount = ledger_service.positive_amount(amount, "Payment amount")
    or_number = ledger_service.clean_or_number(or_number)
    student_id = str(student_id or "").strip()
    if not student_id:
        raise BillingValidationError("student_id is required")

    ledger_service.reserve_or_number(or_number, source=ReceiptNumber.SOURCE_LEGACY)
    return LegacyPayment.objects.create(
        student_id=student_id,
        amount=amount,
        payment_method=(payment_method or "").strip() or "cash",
        or_number=or_number,
        processed_by=str(processed_by) if processed_by is not None else None,
        school_year=(school_year or "").strip(),
    )
