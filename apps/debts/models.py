import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class DebtQuerySet(models.QuerySet):
    def outstanding(self):
        return self.exclude(status=Debt.STATUS_PAID)

    def overdue(self, today=None):
        today = today or timezone.localdate()
        return self.outstanding().filter(due_date__lt=today)


class Debt(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PARTIAL = "partial"
    STATUS_PAID = "paid"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PARTIAL, "Partial"),
        (STATUS_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer_name = models.CharField("Customer", max_length=255)
    customer_phone = models.CharField("Phone", max_length=20, blank=True)
    amount = models.DecimalField("Amount", max_digits=12, decimal_places=2)
    amount_paid = models.DecimalField("Paid", max_digits=12, decimal_places=2, default=Decimal("0"))
    balance = models.DecimalField("Balance", max_digits=12, decimal_places=2, default=Decimal("0"))
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    due_date = models.DateField("Due date", null=True, blank=True)
    notes = models.TextField("Notes", blank=True)
    sale = models.ForeignKey(
        "sales.Sale",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="debts",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="debts",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DebtQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Debt"
        verbose_name_plural = "Debts"

    def __str__(self) -> str:
        return f"{self.customer_name}: {self.balance}"

    def recalculate(self) -> None:
        """Derive balance and status from amount and amount_paid."""
        self.balance = max(self.amount - self.amount_paid, Decimal("0"))
        if self.balance == 0:
            self.status = self.STATUS_PAID
        elif self.amount_paid > 0:
            self.status = self.STATUS_PARTIAL
        else:
            self.status = self.STATUS_PENDING

    def save(self, *args, **kwargs):
        self.recalculate()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"balance", "status"}
        super().save(*args, **kwargs)

    @property
    def is_overdue(self) -> bool:
        return bool(self.due_date and self.due_date < timezone.localdate() and self.status != self.STATUS_PAID)


class DebtPayment(models.Model):
    METHOD_CASH = "cash"
    METHOD_MPESA = "mpesa"
    METHOD_BANK = "bank"
    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_MPESA, "M-Pesa"),
        (METHOD_BANK, "Bank"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    debt = models.ForeignKey(Debt, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField("Amount", max_digits=12, decimal_places=2)
    payment_method = models.CharField("Method", max_length=10, choices=METHOD_CHOICES)
    mpesa_code = models.CharField("M-Pesa code", max_length=50, blank=True)
    notes = models.TextField("Notes", blank=True)
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="debt_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Debt payment"
        verbose_name_plural = "Debt payments"

    def __str__(self) -> str:
        return f"{self.debt.customer_name} paid {self.amount}"
