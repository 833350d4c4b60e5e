# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import (
    AccountBalanceSerializer,
    AccountListSerializer,
)
from accounting.api.serializers.journal_entries import (
    ApproveEntrySerializer,
    JournalEntryLineSerializer,
    JournalEntrySerializer,
    ManualEntryCreateSerializer,
    RejectEntrySerializer,
)
from accounting.api.serializers.periods import (
    AccountingPeriodSerializer,
    ClosePeriodSerializer,
    ReopenPeriodSerializer,
)

__all__ = [
    "AccountListSerializer",
    "AccountBalanceSerializer",
    "JournalEntrySerializer",
    "JournalEntryLineSerializer",
    "ManualEntryCreateSerializer",
    "ApproveEntrySerializer",
    "RejectEntrySerializer",
    "AccountingPeriodSerializer",
    "ClosePeriodSerializer",
    "ReopenPeriodSerializer",
]
