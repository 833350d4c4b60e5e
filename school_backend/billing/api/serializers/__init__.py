# billing/api/serializers/__init__.py

from billing.api.serializers.ledgers import (
    AddChargeSerializer,
    AddPaymentSerializer,
    ApplyDiscountSerializer,
    CurrentLedgerSerializer,
    LedgerChargeSerializer,
    LedgerPaymentSerializer,
    StudentLedgerDetailSerializer,
    StudentLedgerSerializer,
)
from billing.api.serializers.payments import (
    LegacyPaymentSerializer,
    ProcessPaymentSerializer,
    RecordLegacyPaymentSerializer,
)

__all__ = [
    "StudentLedgerSerializer",
    "StudentLedgerDetailSerializer",
    "LedgerChargeSerializer",
    "LedgerPaymentSerializer",
    "CurrentLedgerSerializer",
    "AddChargeSerializer",
    "AddPaymentSerializer",
    "ApplyDiscountSerializer",
    "ProcessPaymentSerializer",
    "LegacyPaymentSerializer",
    "RecordLegacyPaymentSerializer",
]
