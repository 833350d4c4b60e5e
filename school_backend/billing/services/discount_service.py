# billing/services/discount_service.py

"""
DISCOUNT CONFIGURATION SERVICE

- calculate_discount_amount: percentage of base (or fixed value), clamped
- deactivate_discount: soft delete when ledgers already reference it
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction

from billing.models.discount import Discount

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def calculate_discount_amount(discount: Discount, base_amount) -> Decimal:
    """
    Rule:
    - inactive discount -> 0
    - percentage -> base * rate / 100, else the fixed value
    - clamp up to min_amount, then down to max_amount
    """
    if discount is None or not discount.is_active:
        return Decimal("0.00")

    base = _q2(base_amount)
    if discount.is_percentage:
        amount = base * _q2(discount.rate_or_value) / Decimal("100")
    else:
        amount = _q2(discount.rate_or_value)

    if discount.min_amount is not None and amount < discount.min_amount:
        amount = Decimal(discount.min_amount)
    if discount.max_amount is not None and amount > discount.max_amount:
        amount = Decimal(discount.max_amount)

    return _q2(amount)


@transaction.atomic
def deactivate_discount(discount_id) -> bool:
    """
    Remove a discount configuration.

    Returns True when the row was deleted, False when it is referenced by
    ledger charges and was only deactivated.
    """
    discount = Discount.objects.select_for_update().get(pk=discount_id)

    if discount.ledger_charges.exists():
        discount.is_active = False
        discount.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "Discount in use; deactivated instead of deleted",
            extra={"discount_id": discount.pk, "discount_name": discount.discount_name},
        )
        return False

    discount.delete()
    return True
