# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountListSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for the chart of accounts.
    UI needs: code, name, type, normal side and the parent for tree views.
    """

    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "account_type",
            "normal_balance",
            "parent",
            "is_active",
        )
        read_only_fields = fields


class AccountBalanceSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    account_code = serializers.CharField()
    account_name = serializers.CharField()
    normal_balance = serializers.CharField()
    as_of = serializers.DateField(allow_null=True)
    balance = serializers.DecimalField(max_digits=16, decimal_places=2)
