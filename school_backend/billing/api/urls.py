# billing/api/urls.py

from django.urls import path

from billing.api.views import (
    AgingReportView,
    CurrentLedgerView,
    LedgerChargeCreateView,
    LedgerDiscountCreateView,
    LedgerPaymentCreateView,
    LegacyPaymentListCreateView,
    ProcessPaymentView,
    StudentLedgerDetailView,
    StudentLedgerListView,
)

urlpatterns = [
    # Ledgers
    path("ledgers/", StudentLedgerListView.as_view(), name="student-ledgers"),
    path("ledgers/current/", CurrentLedgerView.as_view(), name="student-ledger-current"),
    path("ledgers/<int:pk>/", StudentLedgerDetailView.as_view(), name="student-ledger-detail"),
    path("ledgers/<int:pk>/charges/", LedgerChargeCreateView.as_view(), name="student-ledger-charges"),
    path(
        "ledgers/<int:pk>/discounts/",
        LedgerDiscountCreateView.as_view(),
        name="student-ledger-discounts",
    ),
    path(
        "ledgers/<int:pk>/payments/",
        LedgerPaymentCreateView.as_view(),
        name="student-ledger-payments",
    ),
    # Cashier
    path("payments/", ProcessPaymentView.as_view(), name="student-payments"),
    path(
        "legacy-payments/",
        LegacyPaymentListCreateView.as_view(),
        name="legacy-payments",
    ),
    # Reports
    path("aging/", AgingReportView.as_view(), name="student-aging"),
]
