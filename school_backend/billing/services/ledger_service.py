# billing/services/ledger_service.py

"""
======================================================
PATH: billing/services/ledger_service.py
======================================================
STUDENT LEDGER ENGINE

One ledger per (student, school year). Charges, discounts and payments are
appended as rows; the ledger's totals are a cache of those rows.

Rules:
- recalculate_totals is the ONLY writer of total_charges / total_payments /
  balance / status, and it always folds the live child rows
- Every mutation locks the ledger row (select_for_update) and recalculates
  inside the same transaction
- Reads go through ensure_consistent(), which may write: it repopulates
  missing initial charges and refreshes the totals
- A discount configuration applies at most once per ledger
- A payment never exceeds the live balance
- OR numbers are unique across ledger payments and the legacy payment log
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.services.audit_service import record_audit_event
from billing.models.ledger import LedgerCharge, LedgerPayment, StudentLedger
from billing.models.legacy_payment import LegacyPayment
from billing.models.receipt import ReceiptNumber
from billing.services.discount_service import calculate_discount_amount
from billing.services.exceptions import (
    BillingValidationError,
    DuplicateDiscountError,
    DuplicateOrNumberError,
    LedgerNotFoundError,
    NoActiveSchoolYearError,
    PaymentExceedsBalanceError,
)
from billing.services.grade_levels import coerce_grade_level, grade_label
from billing.services.providers import (
    get_discount_store,
    get_fee_schedule_provider,
    get_school_year_resolver,
    get_student_grade_resolver,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
TOTAL_TOLERANCE = Decimal("0.01")

INITIAL_CHARGE_LABELS = {
    LedgerCharge.TYPE_TUITION: "Tuition Fee",
    LedgerCharge.TYPE_MISC: "Miscellaneous Fee",
    LedgerCharge.TYPE_OTHER: "Other Fees",
}


def _money(value) -> Decimal:
    if value is None or value == "":
        raise BillingValidationError("Amount is required")
    try:
        amt = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise BillingValidationError(f"Invalid money value: {value!r}") from exc
    if not amt.is_finite():
        raise BillingValidationError(f"Invalid money value: {value!r}")
    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def positive_amount(value, label: str) -> Decimal:
    amount = _money(value)
    if amount <= 0:
        raise BillingValidationError(f"{label} must be greater than zero")
    return amount


def _php(amount: Decimal) -> str:
    return f"Php {amount:,.2f}"


# ------------------------------------------------------------
# LOCKING + DERIVED TOTALS
# ------------------------------------------------------------


def _lock_ledger(ledger_id) -> StudentLedger:
    try:
        return StudentLedger.objects.select_for_update().get(pk=ledger_id)
    except (StudentLedger.DoesNotExist, ValueError, TypeError) as exc:
        logger.info("Ledger lookup failed", extra={"ledger_id": ledger_id})
        raise LedgerNotFoundError(f"Ledger {ledger_id!r} not found") from exc


def live_totals(ledger: StudentLedger) -> tuple[Decimal, Decimal]:
    charges = LedgerCharge.objects.filter(ledger=ledger).aggregate(
        total=Coalesce(Sum("amount"), ZERO)
    )["total"]
    payments = LedgerPayment.objects.filter(ledger=ledger).aggregate(
        total=Coalesce(Sum("amount"), ZERO)
    )["total"]
    return (
        Decimal(charges).quantize(TWOPLACES, rounding=ROUND_HALF_UP),
        Decimal(payments).quantize(TWOPLACES, rounding=ROUND_HALF_UP),
    )


def derive_status(total_payments: Decimal, balance: Decimal) -> str:
    if total_payments <= 0:
        return StudentLedger.STATUS_UNPAID
    if balance > 0:
        return StudentLedger.STATUS_PARTIALLY_PAID
    return StudentLedger.STATUS_FULLY_PAID


def _recalculate(ledger: StudentLedger) -> StudentLedger:
    total_charges, total_payments = live_totals(ledger)
    balance = total_charges - total_payments

    ledger.total_charges = total_charges
    ledger.total_payments = total_payments
    ledger.balance = balance
    ledger.status = derive_status(total_payments, balance)
    ledger.save(
        update_fields=["total_charges", "total_payments", "balance", "status", "updated_at"]
    )
    return ledger


@transaction.atomic
def recalculate_totals(ledger_id) -> StudentLedger:
    return _recalculate(_lock_ledger(ledger_id))


# ------------------------------------------------------------
# INITIAL CHARGES
# ------------------------------------------------------------


def _has_initial_charges(ledger: StudentLedger) -> bool:
    return ledger.charges.filter(charge_type__in=LedgerCharge.INITIAL_TYPES).exists()


def _populate(ledger: StudentLedger, grade_level: int | None) -> list[LedgerCharge]:
    if grade_level is None:
        logger.warning(
            "Ledger has no grade level; initial charges not populated",
            extra={"ledger_id": ledger.pk, "student_id": ledger.student_id},
        )
        return []

    fees = get_fee_schedule_provider().get_fees(grade_level)
    if fees is None:
        logger.warning(
            "No fee schedule for grade level; initial charges not populated",
            extra={
                "ledger_id": ledger.pk,
                "student_id": ledger.student_id,
                "grade_level": grade_label(grade_level),
            },
        )
        return []

    components = [
        (LedgerCharge.TYPE_TUITION, fees.tuition),
        (LedgerCharge.TYPE_MISC, fees.misc),
        (LedgerCharge.TYPE_OTHER, fees.other),
    ]

    created = [
        LedgerCharge.objects.create(
            ledger=ledger,
            charge_type=charge_type,
            description=INITIAL_CHARGE_LABELS[charge_type],
            amount=Decimal(amount).quantize(TWOPLACES, rounding=ROUND_HALF_UP),
        )
        for charge_type, amount in components
        if amount and amount > 0
    ]

    inserted = sum((charge.amount for charge in created), ZERO)
    if abs(inserted - fees.total) > TOTAL_TOLERANCE:
        logger.warning(
            "Initial charges do not match the fee schedule total",
            extra={
                "ledger_id": ledger.pk,
                "grade_level": grade_label(grade_level),
                "inserted_total": str(inserted),
                "schedule_total": str(fees.total),
            },
        )

    logger.info(
        "Initial charges populated",
        extra={
            "ledger_id": ledger.pk,
            "student_id": ledger.student_id,
            "school_year": ledger.school_year,
            "charges": len(created),
            "total": str(inserted),
        },
    )
    return created


@transaction.atomic
def populate_initial_charges(ledger_id, *, grade_level=None) -> list[LedgerCharge]:
    """
    Insert Tuition / Misc / Other charges from the fee schedule.

    Idempotent: a ledger that already holds initial charges is left alone.
    """
    ledger = _lock_ledger(ledger_id)

    code = coerce_grade_level(grade_level)
    if ledger.grade_level is None and code is not None:
        ledger.grade_level = code
        ledger.save(update_fields=["grade_level", "updated_at"])

    if _has_initial_charges(ledger):
        logger.info(
            "Initial charges already present; skipping",
            extra={"ledger_id": ledger.pk},
        )
        return []

    created = _populate(ledger, ledger.grade_level)
    _recalculate(ledger)
    return created


# ------------------------------------------------------------
# LEDGER LIFECYCLE + READS
# ------------------------------------------------------------


def _clean_student_id(student_id) -> str:
    value = str(student_id or "").strip()
    if not value:
        raise BillingValidationError("student_id is required")
    return value


def _ensure(ledger: StudentLedger) -> StudentLedger:
    if not ledger.charges.exists():
        if ledger.grade_level is None:
            resolved = get_student_grade_resolver().get_grade_level(ledger.student_id)
            if resolved is not None:
                ledger.grade_level = coerce_grade_level(resolved)
                ledger.save(update_fields=["grade_level", "updated_at"])
        _populate(ledger, ledger.grade_level)
    return _recalculate(ledger)


@transaction.atomic
def ensure_consistent(ledger_id) -> StudentLedger:
    """
    Repair a ledger before it is read: populate missing initial charges and
    refresh the cached totals. Safe to call any number of times.
    """
    return _ensure(_lock_ledger(ledger_id))


@transaction.atomic
def get_or_create_for_current_year(student_id, *, grade_level=None) -> StudentLedger:
    student_id = _clean_student_id(student_id)
    requested = coerce_grade_level(grade_level)

    school_year = get_school_year_resolver().get_active_school_year()
    if not school_year:
        raise NoActiveSchoolYearError(
            "No active school year is open. Open a school year before billing students."
        )

    ledger = (
        StudentLedger.objects.select_for_update()
        .filter(student_id=student_id, school_year=school_year)
        .first()
    )

    if ledger is None:
        if requested is None:
            requested = coerce_grade_level(
                get_student_grade_resolver().get_grade_level(student_id)
            )
        try:
            with transaction.atomic():
                ledger = StudentLedger.objects.create(
                    student_id=student_id,
                    school_year=school_year,
                    grade_level=requested,
                )
        except (IntegrityError, ValidationError):
            # Race-safe: a concurrent request created it first
            ledger = StudentLedger.objects.select_for_update().get(
                student_id=student_id, school_year=school_year
            )
        else:
            logger.info(
                "Student ledger created",
                extra={
                    "ledger_id": ledger.pk,
                    "student_id": student_id,
                    "school_year": school_year,
                    "grade_level": grade_label(requested),
                },
            )
    elif ledger.grade_level is None and requested is not None:
        ledger.grade_level = requested
        ledger.save(update_fields=["grade_level", "updated_at"])
    elif requested is not None and requested != ledger.grade_level:
        logger.warning(
            "Requested grade level differs from the ledger's; keeping the ledger's",
            extra={
                "ledger_id": ledger.pk,
                "ledger_grade_level": grade_label(ledger.grade_level),
                "requested_grade_level": grade_label(requested),
            },
        )

    return _ensure(ledger)


def get_ledger(ledger_id) -> StudentLedger:
    return ensure_consistent(ledger_id)


def get_ledger_for_student(student_id, school_year: str) -> StudentLedger:
    student_id = _clean_student_id(student_id)
    ledger = StudentLedger.objects.filter(
        student_id=student_id, school_year=(school_year or "").strip()
    ).first()
    if ledger is None:
        logger.info(
            "Ledger lookup failed",
            extra={"student_id": student_id, "school_year": school_year},
        )
        raise LedgerNotFoundError(
            f"No ledger for student {student_id} in school year {school_year}"
        )
    return ensure_consistent(ledger.pk)


def list_ledgers_for_student(student_id):
    return StudentLedger.objects.filter(
        student_id=_clean_student_id(student_id)
    ).order_by("-school_year")


def get_previous_balance_ledger(student_id, *, excluding_year: str | None) -> StudentLedger | None:
    """Most recent other-year ledger that still carries a balance."""
    qs = StudentLedger.objects.filter(
        student_id=_clean_student_id(student_id), balance__gt=0
    )
    if excluding_year:
        qs = qs.exclude(school_year=excluding_year)
    return qs.order_by("-school_year").first()


def aging_report():
    return StudentLedger.objects.filter(balance__gt=0).order_by("-school_year", "student_id")


# ------------------------------------------------------------
# MUTATIONS
# ------------------------------------------------------------


@transaction.atomic
def add_charge(ledger_id, *, charge_type: str, amount, description: str | None = None) -> LedgerCharge:
    amount = positive_amount(amount, "Charge amount")

    valid_types = dict(LedgerCharge.CHARGE_TYPES)
    if charge_type not in valid_types or charge_type == LedgerCharge.TYPE_DISCOUNT:
        raise BillingValidationError(f"Invalid charge type: {charge_type!r}")

    ledger = _lock_ledger(ledger_id)
    charge = LedgerCharge.objects.create(
        ledger=ledger,
        charge_type=charge_type,
        description=(description or "").strip() or valid_types[charge_type],
        amount=amount,
    )
    _recalculate(ledger)

    logger.info(
        "Ledger charge added",
        extra={"ledger_id": ledger.pk, "charge_type": charge_type, "amount": str(amount)},
    )
    return charge


@transaction.atomic
def apply_discount(
    ledger_id,
    *,
    discount_type: str,
    amount,
    discount_id=None,
    description: str | None = None,
) -> LedgerCharge:
    amount = positive_amount(amount, "Discount amount")
    discount_type = (discount_type or "").strip()
    if not discount_type:
        raise BillingValidationError("discount_type is required")

    ledger = _lock_ledger(ledger_id)

    discount = None
    if discount_id is not None:
        discount = get_discount_store().get_discount(discount_id)
        if discount is None:
            raise BillingValidationError(f"Discount configuration {discount_id!r} not found")

        if ledger.charges.filter(discount_id=discount.pk).exists():
            raise DuplicateDiscountError(
                f"Discount '{discount.discount_name}' has already been applied to this ledger."
            )

    try:
        with transaction.atomic():
            charge = LedgerCharge.objects.create(
                ledger=ledger,
                charge_type=LedgerCharge.TYPE_DISCOUNT,
                description=(description or "").strip() or f"{discount_type} Discount",
                amount=-amount,
                discount=discount,
            )
    except (IntegrityError, ValidationError) as exc:
        if discount is not None and ledger.charges.filter(discount_id=discount.pk).exists():
            raise DuplicateDiscountError(
                f"Discount '{discount.discount_name}' has already been applied to this ledger."
            ) from exc
        raise BillingValidationError(f"Discount could not be applied: {exc}") from exc

    _recalculate(ledger)

    record_audit_event(
        action="ledger.discount_applied",
        entity_type="StudentLedger",
        entity_id=ledger.pk,
        summary={
            "discount_type": discount_type,
            "discount_id": discount.pk if discount else None,
            "amount": amount,
            "balance": ledger.balance,
        },
    )
    return charge


def apply_configured_discount(ledger_id, *, discount_id, base_amount=None) -> LedgerCharge:
    """
    Compute the amount from the discount configuration and apply it.

    The base defaults to the ledger's tuition charges.
    """
    discount = get_discount_store().get_discount(discount_id)
    if discount is None:
        raise BillingValidationError(f"Discount configuration {discount_id!r} not found")

    if base_amount is None:
        base_amount = LedgerCharge.objects.filter(
            ledger_id=ledger_id, charge_type=LedgerCharge.TYPE_TUITION
        ).aggregate(total=Coalesce(Sum("amount"), ZERO))["total"]

    amount = calculate_discount_amount(discount, base_amount)
    if amount <= 0:
        raise BillingValidationError(
            f"Discount '{discount.discount_name}' yields no amount for base {base_amount}"
        )

    return apply_discount(
        ledger_id,
        discount_type=discount.discount_type or discount.discount_name,
        amount=amount,
        discount_id=discount.pk,
        description=discount.discount_name,
    )


def or_number_in_use(or_number: str) -> bool:
    return (
        ReceiptNumber.objects.filter(or_number=or_number).exists()
        or LedgerPayment.objects.filter(or_number=or_number).exists()
        or LegacyPayment.objects.filter(or_number=or_number).exists()
    )


def reserve_or_number(or_number: str, *, source: str) -> ReceiptNumber:
    """Claim an OR number in the shared registry (unique index)."""
    if or_number_in_use(or_number):
        raise DuplicateOrNumberError(f"OR number {or_number} has already been used.")
    try:
        with transaction.atomic():
            return ReceiptNumber.objects.create(or_number=or_number, source=source)
    except IntegrityError as exc:
        raise DuplicateOrNumberError(f"OR number {or_number} has already been used.") from exc


def clean_or_number(or_number) -> str:
    value = str(or_number or "").strip()
    if not value:
        raise BillingValidationError("OR number is required")
    return value


@transaction.atomic
def add_payment(
    ledger_id,
    *,
    amount,
    or_number: str,
    payment_method: str,
    processed_by=None,
) -> LedgerPayment:
    amount = positive_amount(amount, "Payment amount")
    or_number = clean_or_number(or_number)
    payment_method = (payment_method or "").strip()
    if not payment_method:
        raise BillingValidationError("payment_method is required")

    ledger = _lock_ledger(ledger_id)

    total_charges, total_payments = live_totals(ledger)
    actual_balance = total_charges - total_payments
    if amount > actual_balance:
        raise PaymentExceedsBalanceError(
            f"Payment amount ({_php(amount)}) exceeds balance ({_php(actual_balance)})."
        )

    reserve_or_number(or_number, source=ReceiptNumber.SOURCE_LEDGER)

    try:
        with transaction.atomic():
            payment = LedgerPayment.objects.create(
                ledger=ledger,
                amount=amount,
                or_number=or_number,
                payment_method=payment_method,
                processed_by=str(processed_by) if processed_by is not None else None,
            )
    except (IntegrityError, ValidationError) as exc:
        raise DuplicateOrNumberError(f"OR number {or_number} has already been used.") from exc

    _recalculate(ledger)

    logger.info(
        "Ledger payment recorded",
        extra={
            "ledger_id": ledger.pk,
            "or_number": or_number,
            "amount": str(amount),
            "balance": str(ledger.balance),
        },
    )
    record_audit_event(
        action="ledger.payment_recorded",
        actor_id=processed_by,
        entity_type="StudentLedger",
        entity_id=ledger.pk,
        summary={
            "or_number": or_number,
            "amount": amount,
            "balance_before": actual_balance,
            "balance_after": ledger.balance,
        },
    )
    return payment
