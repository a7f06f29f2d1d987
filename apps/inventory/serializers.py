from decimal import Decimal

from rest_framework import serializers

from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "category",
            "price",
            "cost_price",
            "stock_quantity",
            "min_stock",
            "description",
            "barcode",
            "supplier",
            "is_active",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "name": {"error_messages": {"blank": "Product name is required"}},
            "category": {"error_messages": {"blank": "Product category is required"}},
        }

    def validate_price(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("Valid price is required")
        return value

    def validate_stock_quantity(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Valid stock quantity is required")
        return value

    def validate_barcode(self, value):
        return value or None


class StockUpdateSerializer(serializers.Serializer):
    OPERATIONS = ("add", "subtract")

    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=Decimal("0.001"))
    operation = serializers.ChoiceField(
        choices=OPERATIONS, error_messages={"invalid_choice": 'Operation must be "add" or "subtract"'}
    )
