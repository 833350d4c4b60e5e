# accounting/api/serializers/journal_entries.py

"""
JOURNAL ENTRY SERIALIZERS

Output is read-only. Input for manual entries only: system entries
(payments, expenses, payroll) are posted by services, never over HTTP.
"""

from decimal import Decimal

from rest_framework import serializers

from accounting.models.journal import JournalEntry, JournalEntryLine


class JournalEntryLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalEntryLine
        fields = (
            "line_number",
            "account",
            "account_code",
            "account_name",
            "debit",
            "credit",
            "description",
        )
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    lines = JournalEntryLineSerializer(many=True, read_only=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "entry_number",
            "entry_date",
            "description",
            "reference_type",
            "reference_id",
            "status",
            "status_display",
            "total_debit",
            "total_credit",
            "created_by",
            "approved_by",
            "approved_at",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class ManualLineInputSerializer(serializers.Serializer):
    account_code = serializers.CharField(max_length=20)
    debit = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.00"), default=Decimal("0.00")
    )
    credit = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.00"), default=Decimal("0.00")
    )
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class ManualEntryCreateSerializer(serializers.Serializer):
    entry_date = serializers.DateField()
    description = serializers.CharField(max_length=500)
    notes = serializers.CharField(required=False, allow_blank=True)
    lines = ManualLineInputSerializer(many=True)

    def validate_lines(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("A journal entry needs at least two lines.")
        return value


class ApproveEntrySerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)


class RejectEntrySerializer(serializers.Serializer):
    reason = serializers.CharField()
