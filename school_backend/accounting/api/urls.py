# accounting/api/urls.py

from django.urls import path

from accounting.api.views import (
    AccountBalanceView,
    AccountingPeriodListView,
    AccountListView,
    ApproveJournalEntryView,
    ClosePeriodView,
    JournalEntryDetailView,
    JournalEntryListView,
    ManualJournalEntryCreateView,
    PendingJournalEntriesView,
    RejectJournalEntryView,
    ReopenPeriodView,
    TrialBalanceView,
)

urlpatterns = [
    # Master data (read-only)
    path("accounts/", AccountListView.as_view(), name="accounts"),
    path("accounts/<int:pk>/balance/", AccountBalanceView.as_view(), name="account-balance"),
    # Journal entries
    path("journal-entries/", JournalEntryListView.as_view(), name="journal-entries"),
    path(
        "journal-entries/pending/",
        PendingJournalEntriesView.as_view(),
        name="journal-entries-pending",
    ),
    path(
        "journal-entries/manual/",
        ManualJournalEntryCreateView.as_view(),
        name="journal-entries-manual",
    ),
    path("journal-entries/<int:pk>/", JournalEntryDetailView.as_view(), name="journal-entry-detail"),
    path(
        "journal-entries/<int:pk>/approve/",
        ApproveJournalEntryView.as_view(),
        name="journal-entry-approve",
    ),
    path(
        "journal-entries/<int:pk>/reject/",
        RejectJournalEntryView.as_view(),
        name="journal-entry-reject",
    ),
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    # Periods
    path("periods/", AccountingPeriodListView.as_view(), name="accounting-periods"),
    path("periods/close/", ClosePeriodView.as_view(), name="accounting-period-close"),
    path("periods/<int:pk>/reopen/", ReopenPeriodView.as_view(), name="accounting-period-reopen"),
]
