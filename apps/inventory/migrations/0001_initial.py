import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                ("category", models.CharField(db_index=True, max_length=100, verbose_name="Category")),
                ("price", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="Price")),
                (
                    "cost_price",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="Cost price"),
                ),
                ("stock_quantity", models.IntegerField(default=0, verbose_name="Stock")),
                ("min_stock", models.IntegerField(default=10, verbose_name="Minimum stock")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                (
                    "barcode",
                    models.CharField(blank=True, max_length=64, null=True, unique=True, verbose_name="Barcode"),
                ),
                ("supplier", models.CharField(blank=True, max_length=255, verbose_name="Supplier")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Product",
                "verbose_name_plural": "Products",
                "ordering": ["name"],
            },
        ),
    ]
