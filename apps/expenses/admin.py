from django.contrib import admin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("description", "category", "amount", "expense_date", "status", "approved_by")
    list_filter = ("status", "category", "expense_date")
    search_fields = ("description", "receipt_number", "notes")
