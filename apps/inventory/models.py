import uuid
from decimal import Decimal

from django.db import models
from django.db.models import F


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def low_stock(self):
        return self.filter(stock_quantity__lte=F("min_stock"))


class Product(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField("Name", max_length=255)
    category = models.CharField("Category", max_length=100, db_index=True)
    price = models.DecimalField("Price", max_digits=10, decimal_places=2)
    cost_price = models.DecimalField("Cost price", max_digits=10, decimal_places=2, null=True, blank=True)
    stock_quantity = models.DecimalField("Stock", max_digits=12, decimal_places=3, default=Decimal("0"))
    min_stock = models.IntegerField("Minimum stock", default=10)
    description = models.TextField("Description", blank=True)
    barcode = models.CharField("Barcode", max_length=64, unique=True, null=True, blank=True)
    supplier = models.CharField("Supplier", max_length=255, blank=True)
    is_active = models.BooleanField("Active", default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        verbose_name = "Product"
        verbose_name_plural = "Products"

    def __str__(self) -> str:
        return self.name

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.min_stock

    def has_sales_records(self) -> bool:
        return self.sales.exists()
