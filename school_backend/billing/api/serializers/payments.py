# billing/api/serializers/payments.py

from decimal import Decimal

from rest_framework import serializers

from billing.models.legacy_payment import LegacyPayment


class ProcessPaymentSerializer(serializers.Serializer):
    student_id = serializers.CharField(max_length=64)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    or_number = serializers.CharField(max_length=50)
    payment_method = serializers.CharField(max_length=30, default="cash")


class LegacyPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = LegacyPayment
        fields = (
            "id",
            "student_id",
            "amount",
            "payment_method",
            "or_number",
            "processed_by",
            "school_year",
            "ledger_payment",
            "created_at",
        )
        read_only_fields = fields


class RecordLegacyPaymentSerializer(serializers.Serializer):
    student_id = serializers.CharField(max_length=64)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    or_number = serializers.CharField(max_length=50)
    payment_method = serializers.CharField(max_length=30, default="cash")
    school_year = serializers.CharField(max_length=20, required=False, allow_blank=True)
