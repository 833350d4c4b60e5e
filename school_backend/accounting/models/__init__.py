# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.audit import AuditEvent
from accounting.models.expense import Expense
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.models.payroll import PayrollTransaction
from accounting.models.period import AccountingPeriod
from accounting.models.sequence import JournalSequence

__all__ = [
    "Account",
    "JournalEntry",
    "JournalEntryLine",
    "JournalSequence",
    "AccountingPeriod",
    "Expense",
    "PayrollTransaction",
    "AuditEvent",
]
