# billing/api/serializers/ledgers.py

"""
STUDENT LEDGER SERIALIZERS

Output serializers are read-only (DB truth). Totals, balance and status
come from the ledger row, which the service keeps in sync with its
charges and payments.
"""

from decimal import Decimal

from rest_framework import serializers

from billing.models.ledger import LedgerCharge, LedgerPayment, StudentLedger
from billing.services.exceptions import BillingValidationError
from billing.services.grade_levels import coerce_grade_level, grade_label


class LedgerChargeSerializer(serializers.ModelSerializer):
    charge_type_display = serializers.CharField(source="get_charge_type_display", read_only=True)

    class Meta:
        model = LedgerCharge
        fields = (
            "id",
            "charge_type",
            "charge_type_display",
            "description",
            "amount",
            "discount",
            "created_at",
        )
        read_only_fields = fields


class LedgerPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerPayment
        fields = ("id", "amount", "or_number", "payment_method", "processed_by", "created_at")
        read_only_fields = fields


class StudentLedgerSerializer(serializers.ModelSerializer):
    grade_level_display = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = StudentLedger
        fields = (
            "id",
            "student_id",
            "school_year",
            "grade_level",
            "grade_level_display",
            "total_charges",
            "total_payments",
            "balance",
            "status",
            "status_display",
            "updated_at",
        )
        read_only_fields = fields

    def get_grade_level_display(self, obj) -> str:
        return grade_label(obj.grade_level)


class StudentLedgerDetailSerializer(StudentLedgerSerializer):
    charges = LedgerChargeSerializer(many=True, read_only=True)
    payments = LedgerPaymentSerializer(many=True, read_only=True)

    class Meta(StudentLedgerSerializer.Meta):
        fields = StudentLedgerSerializer.Meta.fields + ("charges", "payments")
        read_only_fields = fields


# ------------------------------------------------------------
# INPUT
# ------------------------------------------------------------


class GradeLevelField(serializers.Field):
    """Accepts a grade code (-1..12) or a label such as "Grade 3" / "Kinder"."""

    def to_internal_value(self, data):
        try:
            return coerce_grade_level(data)
        except BillingValidationError as exc:
            raise serializers.ValidationError(str(exc)) from exc

    def to_representation(self, value):
        return value


class CurrentLedgerSerializer(serializers.Serializer):
    student_id = serializers.CharField(max_length=64)
    grade_level = GradeLevelField(required=False, allow_null=True)


class AddChargeSerializer(serializers.Serializer):
    charge_type = serializers.ChoiceField(
        choices=[c for c in LedgerCharge.CHARGE_TYPES if c[0] != LedgerCharge.TYPE_DISCOUNT]
    )
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class ApplyDiscountSerializer(serializers.Serializer):
    """
    Either a configured discount (discount_id, amount computed from it)
    or an ad-hoc discount (discount_type + amount).
    """

    discount_id = serializers.IntegerField(required=False)
    discount_type = serializers.CharField(max_length=50, required=False, allow_blank=False)
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01"), required=False
    )
    base_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs.get("discount_id") is not None:
            return attrs
        if not attrs.get("discount_type") or attrs.get("amount") is None:
            raise serializers.ValidationError(
                "Provide discount_id, or both discount_type and amount."
            )
        return attrs


class AddPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    or_number = serializers.CharField(max_length=50)
    payment_method = serializers.CharField(max_length=30, default="cash")
