import os
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from apps.inventory.models import Product

SAMPLE_PRODUCTS = [
    ("White Bread", "Bakery", "50.00", "35.00", 25, 10, "Fresh white bread loaf", "Local Bakery"),
    ("Milk 1L", "Dairy", "120.00", "90.00", 30, 15, "Fresh whole milk 1 liter", "Dairy Farm Co."),
    ("Rice 2kg", "Grains", "180.00", "140.00", 20, 8, "Premium white rice 2kg pack", "Rice Suppliers Ltd"),
    ("Cooking Oil 500ml", "Cooking", "200.00", "160.00", 15, 10, "Sunflower cooking oil 500ml", "Oil Distributors"),
    ("Sugar 1kg", "Pantry", "130.00", "100.00", 12, 8, "White granulated sugar 1kg", "Sugar Mills"),
    ("Eggs (12 pieces)", "Dairy", "300.00", "240.00", 8, 5, "Fresh chicken eggs - 12 pieces", "Poultry Farm"),
    ("Tomatoes 1kg", "Vegetables", "80.00", "60.00", 5, 10, "Fresh tomatoes per kilogram", "Local Farmers"),
    ("Onions 1kg", "Vegetables", "100.00", "75.00", 18, 12, "Fresh onions per kilogram", "Local Farmers"),
]


class Command(BaseCommand):
    help = "Seed the default admin user and sample grocery products for local/dev usage."

    def handle(self, *args, **options):
        User = get_user_model()
        username = os.getenv("SEED_ADMIN_USERNAME", "ZionGroceries")
        if not User.objects.filter(username=username).exists():
            User.objects.create_superuser(
                username=username,
                email=os.getenv("SEED_ADMIN_EMAIL", "admin@ziongrocery.local"),
                password=os.getenv("SEED_ADMIN_PASSWORD", "Zion123$"),
            )
            self.stdout.write(f"Created admin user {username}")

        created = 0
        for name, category, price, cost, stock, min_stock, description, supplier in SAMPLE_PRODUCTS:
            if Product.objects.filter(name=name).exists():
                continue
            Product.objects.create(
                name=name,
                category=category,
                price=Decimal(price),
                cost_price=Decimal(cost),
                stock_quantity=stock,
                min_stock=min_stock,
                description=description,
                supplier=supplier,
            )
            created += 1

        self.stdout.write(self.style.SUCCESS(f"Demo data created ({created} new products)."))
