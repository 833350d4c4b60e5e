# accounting/api/serializers/periods.py

"""
PERIOD SERIALIZERS

Close accepts either period_id or (year, month); the period row is
created on demand for (year, month).
"""

from rest_framework import serializers

from accounting.models.period import AccountingPeriod


class AccountingPeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccountingPeriod
        fields = (
            "id",
            "year",
            "month",
            "name",
            "start_date",
            "end_date",
            "is_closed",
            "closed_by",
            "closed_at",
            "closing_notes",
            "reopened_by",
            "reopened_at",
        )
        read_only_fields = fields


class ClosePeriodSerializer(serializers.Serializer):
    period_id = serializers.IntegerField(required=False)
    year = serializers.IntegerField(required=False, min_value=1900)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs.get("period_id") is not None:
            return attrs
        if attrs.get("year") is None or attrs.get("month") is None:
            raise serializers.ValidationError("Provide period_id, or both year and month.")
        return attrs


class ReopenPeriodSerializer(serializers.Serializer):
    reason = serializers.CharField()
