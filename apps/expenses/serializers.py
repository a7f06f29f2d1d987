from rest_framework import serializers

from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Expense
        fields = [
            "id",
            "description",
            "category",
            "amount",
            "expense_date",
            "receipt_number",
            "notes",
            "status",
            "approved_by",
            "approved_at",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "status", "approved_by", "approved_at", "created_by", "created_at", "updated_at"]
        extra_kwargs = {
            "description": {"error_messages": {"blank": "Expense description is required"}},
            "category": {"error_messages": {"blank": "Expense category is required"}},
        }

    def validate_amount(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("Valid expense amount is required")
        return value
