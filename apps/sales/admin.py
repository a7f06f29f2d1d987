from django.contrib import admin

from .models import Sale


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("product_name", "quantity", "unit_price", "total", "payment_method", "status", "date")
    list_filter = ("payment_method", "status", "date")
    search_fields = ("product_name", "customer_name", "customer_phone", "mpesa_code")
    raw_id_fields = ("product", "created_by")
