# billing/models/__init__.py

"""
BILLING MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for billing app models.
"""

from .discount import Discount
from .fee_schedule import GRADE_LEVEL_CHOICES, FeeSchedule
from .ledger import LedgerCharge, LedgerPayment, StudentLedger
from .legacy_payment import LegacyPayment
from .receipt import ReceiptNumber
from .school_year import SchoolYear

__all__ = [
    "GRADE_LEVEL_CHOICES",
    "SchoolYear",
    "FeeSchedule",
    "Discount",
    "StudentLedger",
    "LedgerCharge",
    "LedgerPayment",
    "LegacyPayment",
    "ReceiptNumber",
]
