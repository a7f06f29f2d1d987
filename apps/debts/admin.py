from django.contrib import admin

from .models import Debt, DebtPayment


class DebtPaymentInline(admin.TabularInline):
    model = DebtPayment
    extra = 0
    readonly_fields = ("amount", "payment_method", "mpesa_code", "received_by", "created_at")


@admin.register(Debt)
class DebtAdmin(admin.ModelAdmin):
    list_display = ("customer_name", "customer_phone", "amount", "amount_paid", "balance", "status", "due_date")
    list_filter = ("status", "due_date")
    search_fields = ("customer_name", "customer_phone", "notes")
    readonly_fields = ("balance", "status")
    inlines = [DebtPaymentInline]
