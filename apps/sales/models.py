import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Sale(models.Model):
    PAYMENT_CASH = "cash"
    PAYMENT_MPESA = "mpesa"
    PAYMENT_DEBT = "debt"
    PAYMENT_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_MPESA, "M-Pesa"),
        (PAYMENT_DEBT, "Debt"),
    ]

    STATUS_COMPLETED = "completed"
    STATUS_PENDING = "pending"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_PENDING, "Pending"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        "inventory.Product",
        on_delete=models.PROTECT,
        related_name="sales",
        verbose_name="Product",
    )
    product_name = models.CharField("Product name", max_length=255)
    quantity = models.DecimalField("Quantity", max_digits=12, decimal_places=3)
    unit_price = models.DecimalField("Unit price", max_digits=10, decimal_places=2)
    total = models.DecimalField("Total", max_digits=12, decimal_places=2)
    payment_method = models.CharField("Payment method", max_length=10, choices=PAYMENT_CHOICES)
    customer_name = models.CharField("Customer", max_length=255, blank=True)
    customer_phone = models.CharField("Phone", max_length=20, blank=True)
    mpesa_code = models.CharField("M-Pesa code", max_length=50, blank=True)
    status = models.CharField("Status", max_length=20, choices=STATUS_CHOICES, default=STATUS_COMPLETED)
    notes = models.TextField("Notes", blank=True)
    date = models.DateField("Date", default=timezone.localdate, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="sales",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Sale"
        verbose_name_plural = "Sales"
        indexes = [
            models.Index(fields=["payment_method"], name="sales_payment_method_idx"),
            models.Index(fields=["status"], name="sales_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.product_name} x {self.quantity}"

    @property
    def is_debt(self) -> bool:
        return self.payment_method == self.PAYMENT_DEBT
