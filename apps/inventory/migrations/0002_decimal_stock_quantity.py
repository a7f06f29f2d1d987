from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="product",
            name="stock_quantity",
            field=models.DecimalField(decimal_places=3, default=Decimal("0"), max_digits=12, verbose_name="Stock"),
        ),
    ]
