from decimal import Decimal

from django import forms

from apps.debts.models import Debt, DebtPayment
from apps.expenses.models import Expense
from apps.inventory.models import Product
from apps.sales.models import Sale


class ProductForm(forms.ModelForm):
    class Meta:
        model = Product
        fields = [
            "name",
            "category",
            "price",
            "cost_price",
            "stock_quantity",
            "min_stock",
            "barcode",
            "supplier",
            "description",
        ]
        widgets = {"description": forms.Textarea(attrs={"rows": 2})}

    def clean_price(self):
        price = self.cleaned_data["price"]
        if price is None or price <= 0:
            raise forms.ValidationError("Valid price is required")
        return price

    def clean_stock_quantity(self):
        quantity = self.cleaned_data["stock_quantity"]
        if quantity is None or quantity < 0:
            raise forms.ValidationError("Valid stock quantity is required")
        return quantity

    def clean_barcode(self):
        return (self.cleaned_data.get("barcode") or "").strip() or None


class SaleForm(forms.ModelForm):
    unit_price = forms.DecimalField(max_digits=10, decimal_places=2, required=False)

    class Meta:
        model = Sale
        fields = [
            "product",
            "quantity",
            "unit_price",
            "payment_method",
            "customer_name",
            "customer_phone",
            "mpesa_code",
            "notes",
        ]
        widgets = {"notes": forms.Textarea(attrs={"rows": 2})}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["product"].queryset = Product.objects.active()

    def clean_quantity(self):
        quantity = self.cleaned_data["quantity"]
        if quantity is None or quantity <= 0:
            raise forms.ValidationError("Valid quantity is required")
        return quantity

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("payment_method") == Sale.PAYMENT_DEBT:
            if not (cleaned.get("customer_name") or "").strip():
                self.add_error("customer_name", "Customer name is required for debt payments")
            if not (cleaned.get("customer_phone") or "").strip():
                self.add_error("customer_phone", "Customer phone is required for debt payments")
        return cleaned


class ExpenseForm(forms.ModelForm):
    class Meta:
        model = Expense
        fields = ["description", "category", "amount", "expense_date", "receipt_number", "notes"]
        widgets = {
            "expense_date": forms.DateInput(attrs={"type": "date"}),
            "notes": forms.Textarea(attrs={"rows": 2}),
        }

    def clean_amount(self):
        amount = self.cleaned_data["amount"]
        if amount is None or amount <= 0:
            raise forms.ValidationError("Valid expense amount is required")
        return amount


class DebtForm(forms.ModelForm):
    class Meta:
        model = Debt
        fields = ["customer_name", "customer_phone", "amount", "due_date", "notes"]
        widgets = {
            "due_date": forms.DateInput(attrs={"type": "date"}),
            "notes": forms.Textarea(attrs={"rows": 2}),
        }

    def clean_amount(self):
        amount = self.cleaned_data["amount"]
        if amount is None or amount <= 0:
            raise forms.ValidationError("Valid debt amount is required")
        return amount


class DebtPaymentForm(forms.ModelForm):
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))

    class Meta:
        model = DebtPayment
        fields = ["amount", "payment_method", "mpesa_code", "notes"]
