from rest_framework import serializers

from apps.inventory.models import Product

from .models import Sale
from .services import create_sale, update_sale


class SaleSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(),
        error_messages={"required": "Product ID is required", "does_not_exist": "Product not found"},
    )
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)

    class Meta:
        model = Sale
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "total",
            "payment_method",
            "customer_name",
            "customer_phone",
            "mpesa_code",
            "status",
            "notes",
            "date",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "product_name", "total", "created_by", "created_at", "updated_at"]
        extra_kwargs = {
            "payment_method": {
                "error_messages": {"invalid_choice": "Valid payment method is required (cash, mpesa, or debt)"}
            },
        }

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Valid quantity is required")
        return value

    def validate_unit_price(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("Valid unit price is required")
        return value

    def validate(self, attrs):
        def current(field, default=""):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field, default) if self.instance else default

        if current("payment_method") == Sale.PAYMENT_DEBT:
            errors = {}
            if not (current("customer_name") or "").strip():
                errors["customer_name"] = "Customer name is required for debt payments"
            if not (current("customer_phone") or "").strip():
                errors["customer_phone"] = "Customer phone is required for debt payments"
            if errors:
                raise serializers.ValidationError(errors)
        return attrs

    def create(self, validated_data):
        request = self.context.get("request")
        return create_sale(validated_data, user=getattr(request, "user", None))

    def update(self, instance, validated_data):
        return update_sale(instance, validated_data)


class SaleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[choice for choice, _ in Sale.STATUS_CHOICES],
        error_messages={"invalid_choice": "Valid status is required (completed, pending, cancelled)"},
    )
