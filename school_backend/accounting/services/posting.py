# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Map business events to balanced journal lines and call
create_journal_entry (the engine).

This module should remain a thin adapter:
- It DOES NOT do workflows (orchestrators do).
- It DOES map business events -> accounting lines.
- It ALWAYS calls create_journal_entry (engine) for atomicity + idempotency.

Events:
- Student payment  : Dr Cash / Cr Tuition Revenue
- Approved expense : Dr <category expense> / Cr Cash
- Paid payroll     : Dr Salaries (gross + employer contributions)
                     Cr Cash (net)
                     Cr Accrued Payroll Taxes (contributions + deductions)

System entries are created directly as POSTED: they balance by construction.
Expense and payroll postings are idempotent; a repeat returns the existing entry.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from django.utils import timezone

from accounting.models.expense import Expense
from accounting.models.journal import JournalEntry
from accounting.models.payroll import PayrollTransaction
from accounting.services import account_resolver
from accounting.services.audit_service import record_audit_event
from accounting.services.exceptions import IdempotencyError, PostingRuleError
from accounting.services.journal_entry_service import create_journal_entry

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _event_date(obj, *attrs) -> date:
    for attr in attrs:
        value = getattr(obj, attr, None)
        if value is None:
            continue
        if isinstance(value, datetime):
            if timezone.is_naive(value):
                value = timezone.make_aware(value, timezone.get_current_timezone())
            return timezone.localtime(value).date()
        if isinstance(value, date):
            return value
    return timezone.localdate()


def _find_existing(reference_type: str, reference_ids: Iterable[str]) -> JournalEntry | None:
    ids = [str(r) for r in reference_ids if r]
    if not ids:
        return None
    return (
        JournalEntry.objects.filter(reference_type=reference_type, reference_id__in=ids)
        .order_by("created_at")
        .first()
    )


def _create_or_existing(*, reference_type: str, reference_id: str, **kwargs) -> JournalEntry:
    try:
        return create_journal_entry(
            reference_type=reference_type,
            reference_id=reference_id,
            status=JournalEntry.STATUS_POSTED,
            **kwargs,
        )
    except IdempotencyError:
        existing = _find_existing(reference_type, [reference_id])
        if existing is None:
            raise
        logger.info(
            "Journal entry already posted for event; returning existing",
            extra={
                "reference_type": reference_type,
                "reference_id": reference_id,
                "entry_number": existing.entry_number,
            },
        )
        return existing


def _audit_posted(entry: JournalEntry, *, actor_id, event: str) -> None:
    record_audit_event(
        action=f"journal_entry.{event}_posted",
        actor_id=actor_id,
        entity_type="JournalEntry",
        entity_id=entry.pk,
        summary={
            "entry_number": entry.entry_number,
            "reference_type": entry.reference_type,
            "reference_id": entry.reference_id,
            "total_debit": entry.total_debit,
            "total_credit": entry.total_credit,
        },
    )


# ------------------------------------------------------------
# PAYMENTS
# ------------------------------------------------------------


def post_payment_entry(payment, *, actor_id=None) -> JournalEntry:
    """
    Post a student payment: Dr Cash / Cr Tuition Revenue.

    The payment's OR number is the reference, so a receipt is never
    posted twice.
    """
    amount = _money(getattr(payment, "amount", None))
    if amount <= 0:
        raise PostingRuleError("Payment amount must be greater than zero")

    reference_id = (getattr(payment, "or_number", None) or str(payment.pk)).strip()

    cash = account_resolver.get_cash_account()
    revenue = account_resolver.get_tuition_revenue_account()

    existing = _find_existing(JournalEntry.REF_PAYMENT, [reference_id])
    if existing is not None:
        return existing

    student_id = getattr(payment, "student_id", None)
    if student_id is None and getattr(payment, "ledger_id", None):
        student_id = payment.ledger.student_id

    entry = _create_or_existing(
        reference_type=JournalEntry.REF_PAYMENT,
        reference_id=reference_id,
        description=f"Student payment - OR {reference_id} (student {student_id})",
        entry_date=_event_date(payment, "created_at"),
        created_by=actor_id,
        approved_by=actor_id,
        lines=[
            {"account": cash, "debit": amount, "description": "Cash received"},
            {"account": revenue, "credit": amount, "description": "Tuition and fees"},
        ],
    )
    _audit_posted(entry, actor_id=actor_id, event="payment")
    return entry


# ------------------------------------------------------------
# EXPENSES
# ------------------------------------------------------------


def post_expense_entry(expense: Expense, *, actor_id=None, approver_id=None) -> JournalEntry:
    if expense.status != Expense.STATUS_APPROVED:
        raise PostingRuleError(
            f"Expense {expense.expense_code} must be approved before posting "
            f"(status={expense.status})"
        )

    existing = _find_existing(JournalEntry.REF_EXPENSE, [str(expense.pk)])
    if existing is not None:
        logger.info(
            "Expense already posted",
            extra={"expense_id": expense.pk, "entry_number": existing.entry_number},
        )
        return existing

    amount = _money(expense.amount)
    expense_account = account_resolver.get_expense_account_for_category(expense.category)
    cash = account_resolver.get_cash_account()

    description = f"Expense {expense.expense_code} - {expense.category}"
    if expense.description:
        description = f"{description}: {expense.description}"

    entry = _create_or_existing(
        reference_type=JournalEntry.REF_EXPENSE,
        reference_id=str(expense.pk),
        description=description,
        entry_date=expense.expense_date,
        created_by=actor_id,
        approved_by=approver_id or expense.approved_by,
        lines=[
            {"account": expense_account, "debit": amount, "description": expense.category},
            {"account": cash, "credit": amount, "description": "Cash paid"},
        ],
    )
    _audit_posted(entry, actor_id=actor_id, event="expense")
    return entry


# ------------------------------------------------------------
# PAYROLL
# ------------------------------------------------------------


def _payroll_lines(*, gross, deductions, net, contribution) -> list[dict]:
    salaries = account_resolver.get_salaries_expense_account()
    cash = account_resolver.get_cash_account()

    lines = [
        {
            "account": salaries,
            "debit": gross + contribution,
            "description": "Gross salaries and employer contributions",
        },
        {"account": cash, "credit": net, "description": "Net pay disbursed"},
    ]

    withheld = contribution + deductions
    if withheld > 0:
        accrued = account_resolver.get_accrued_payroll_taxes_account()
        lines.append(
            {
                "account": accrued,
                "credit": withheld,
                "description": "Employer contributions and employee deductions",
            }
        )
    return lines


def _require_paid(transaction: PayrollTransaction) -> None:
    if transaction.status != PayrollTransaction.STATUS_PAID:
        raise PostingRuleError(
            f"Payroll {transaction.transaction_code} must be paid before posting "
            f"(status={transaction.status})"
        )


def post_payroll_entry(
    payroll: PayrollTransaction, *, actor_id=None, approver_id=None
) -> JournalEntry:
    _require_paid(payroll)

    existing = _find_existing(JournalEntry.REF_PAYROLL, [payroll.transaction_code])
    if existing is not None:
        return existing

    entry = _create_or_existing(
        reference_type=JournalEntry.REF_PAYROLL,
        reference_id=payroll.transaction_code,
        description=(
            f"Payroll {payroll.transaction_code} - employee {payroll.employee_id}"
            f" {payroll.pay_period}".rstrip()
        ),
        entry_date=_event_date(payroll, "payment_date", "created_at"),
        created_by=actor_id,
        approved_by=approver_id,
        lines=_payroll_lines(
            gross=_money(payroll.gross_salary),
            deductions=_money(payroll.total_deductions),
            net=_money(payroll.net_salary),
            contribution=_money(payroll.total_company_contribution),
        ),
    )
    _audit_posted(entry, actor_id=actor_id, event="payroll")
    return entry


def post_batch_payroll_entry(
    transactions: Iterable[PayrollTransaction], *, actor_id=None, approver_id=None
) -> JournalEntry:
    """
    One entry for a whole payroll run.

    The first transaction's code is the reference. If any transaction of
    the batch was already posted, that entry is returned unchanged.
    """
    transactions = list(transactions)
    if not transactions:
        raise PostingRuleError("Payroll batch is empty")

    for tx in transactions:
        _require_paid(tx)

    codes = [tx.transaction_code for tx in transactions]
    existing = _find_existing(JournalEntry.REF_PAYROLL, codes)
    if existing is not None:
        logger.info(
            "Payroll batch already posted",
            extra={"entry_number": existing.entry_number, "transactions": len(codes)},
        )
        return existing

    gross = sum((_money(tx.gross_salary) for tx in transactions), Decimal("0.00"))
    deductions = sum((_money(tx.total_deductions) for tx in transactions), Decimal("0.00"))
    net = sum((_money(tx.net_salary) for tx in transactions), Decimal("0.00"))
    contribution = sum(
        (_money(tx.total_company_contribution) for tx in transactions), Decimal("0.00")
    )

    entry_date = max(_event_date(tx, "payment_date", "created_at") for tx in transactions)
    first = transactions[0]
    period = first.pay_period or first.batch_timestamp

    entry = _create_or_existing(
        reference_type=JournalEntry.REF_PAYROLL,
        reference_id=first.transaction_code,
        description=f"Payroll batch {period} - {len(transactions)} employees".replace("  ", " "),
        entry_date=entry_date,
        created_by=actor_id,
        approved_by=approver_id,
        lines=_payroll_lines(
            gross=gross, deductions=deductions, net=net, contribution=contribution
        ),
    )
    _audit_posted(entry, actor_id=actor_id, event="payroll_batch")
    return entry
