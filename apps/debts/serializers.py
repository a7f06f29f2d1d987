from decimal import Decimal

from rest_framework import serializers

from .models import Debt, DebtPayment


class DebtSerializer(serializers.ModelSerializer):
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Debt
        fields = [
            "id",
            "customer_name",
            "customer_phone",
            "amount",
            "amount_paid",
            "balance",
            "status",
            "due_date",
            "notes",
            "sale",
            "is_overdue",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "amount_paid", "balance", "status", "sale", "created_by", "created_at", "updated_at"]
        extra_kwargs = {
            "customer_name": {"error_messages": {"blank": "Customer name is required"}},
        }

    def validate_amount(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("Valid debt amount is required")
        return value


class DebtPaymentSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))

    class Meta:
        model = DebtPayment
        fields = ["id", "debt", "amount", "payment_method", "mpesa_code", "notes", "received_by", "created_at"]
        read_only_fields = ["id", "debt", "received_by", "created_at"]
        extra_kwargs = {
            "payment_method": {
                "error_messages": {"invalid_choice": "Valid payment method is required (cash, mpesa, bank)"}
            },
        }
