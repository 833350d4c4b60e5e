# billing/api/views/__init__.py

"""
billing.api.views package

Do NOT import billing.api.urls from here to avoid circular imports.
"""

from billing.api.views.ledgers import (
    CurrentLedgerView,
    LedgerChargeCreateView,
    LedgerDiscountCreateView,
    LedgerPaymentCreateView,
    StudentLedgerDetailView,
    StudentLedgerListView,
)
from billing.api.views.payments import (
    AgingReportView,
    LegacyPaymentListCreateView,
    ProcessPaymentView,
)

__all__ = [
    "StudentLedgerListView",
    "CurrentLedgerView",
    "StudentLedgerDetailView",
    "LedgerChargeCreateView",
    "LedgerDiscountCreateView",
    "LedgerPaymentCreateView",
    "ProcessPaymentView",
    "AgingReportView",
    "LegacyPaymentListCreateView",
]
