# customers/serializers.py

from rest_framework import serializers

from customers.models import Customer, CustomerLedgerEntry


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            "id",
            "customer_code",
            "customer_name",
            "contact_person",
            "email",
            "phone",
            "address",
            "credit_limit",
            "opening_balance",
            "current_balance",
            "payment_terms_days",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "current_balance", "created_at", "updated_at"]

    def validate(self, attrs):
        # Opening balance is posted to the ledger once, at creation.
        if self.instance is not None and "opening_balance" in attrs:
            if attrs["opening_balance"] != self.instance.opening_balance:
                raise serializers.ValidationError(
                    {"opening_balance": "Opening balance cannot be changed after creation."}
                )
        return attrs


class CustomerLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerLedgerEntry
        fields = [
            "id",
            "customer",
            "transaction_date",
            "transaction_type",
            "reference_no",
            "debit",
            "credit",
            "balance",
            "description",
            "created_at",
        ]
        read_only_fields = fields


class StatementQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
