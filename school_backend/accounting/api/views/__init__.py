# accounting/api/views/__init__.py

"""
accounting.api.views package

Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import AccountBalanceView, AccountListView
from accounting.api.views.journal_entries import (
    ApproveJournalEntryView,
    JournalEntryDetailView,
    JournalEntryListView,
    ManualJournalEntryCreateView,
    PendingJournalEntriesView,
    RejectJournalEntryView,
)
from accounting.api.views.periods import (
    AccountingPeriodListView,
    ClosePeriodView,
    ReopenPeriodView,
)
from accounting.api.views.trial_balance import TrialBalanceView

__all__ = [
    "AccountListView",
    "AccountBalanceView",
    "JournalEntryListView",
    "JournalEntryDetailView",
    "PendingJournalEntriesView",
    "ManualJournalEntryCreateView",
    "ApproveJournalEntryView",
    "RejectJournalEntryView",
    "AccountingPeriodListView",
    "ClosePeriodView",
    "ReopenPeriodView",
    "TrialBalanceView",
]
