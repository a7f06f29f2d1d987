import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("inventory", "0002_decimal_stock_quantity"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("product_name", models.CharField(max_length=255, verbose_name="Product name")),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12, verbose_name="Quantity")),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="Unit price")),
                ("total", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="Total")),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("cash", "Cash"), ("mpesa", "M-Pesa"), ("debt", "Debt")],
                        max_length=10,
                        verbose_name="Payment method",
                    ),
                ),
                ("customer_name", models.CharField(blank=True, max_length=255, verbose_name="Customer")),
                ("customer_phone", models.CharField(blank=True, max_length=20, verbose_name="Phone")),
                ("mpesa_code", models.CharField(blank=True, max_length=50, verbose_name="M-Pesa code")),
                (
                    "status",
                    models.CharField(
                        choices=[("completed", "Completed"), ("pending", "Pending"), ("cancelled", "Cancelled")],
                        default="completed",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                (
                    "date",
                    models.DateField(db_index=True, default=django.utils.timezone.localdate, verbose_name="Date"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="inventory.product",
                        verbose_name="Product",
                    ),
                ),
            ],
            options={
                "verbose_name": "Sale",
                "verbose_name_plural": "Sales",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["payment_method"], name="sales_payment_method_idx"),
                    models.Index(fields=["status"], name="sales_status_idx"),
                ],
            },
        ),
    ]
