from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.sales.models import Sale

from .models import Product


class ProductApiTests(APITestCase):
    def setUp(self):
        user = get_user_model().objects.create_user(username="owner", password="Grocer#2024")
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")
        self.sugar = Product.objects.create(
            name="Sugar 1kg", category="Groceries", price=Decimal("150"), stock_quantity=Decimal("40"), min_stock=10
        )
        self.milk = Product.objects.create(
            name="Milk 500ml", category="Dairy", price=Decimal("60"), stock_quantity=Decimal("5"), min_stock=10
        )

    def test_list_requires_auth(self):
        self.client.credentials()
        resp = self.client.get("/api/products/")
        self.assertEqual(resp.status_code, 401)
        self.assertFalse(resp.data["success"])

    def test_create_product(self):
        resp = self.client.post(
            "/api/products/",
            {"name": "Bread", "category": "Bakery", "price": "55.00", "stock_quantity": "20", "barcode": ""},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        product = Product.objects.get(name="Bread")
        self.assertIsNone(product.barcode)
        self.assertEqual(product.min_stock, 10)

    def test_create_rejects_non_positive_price(self):
        resp = self.client.post(
            "/api/products/", {"name": "Bread", "category": "Bakery", "price": "0"}, format="json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Valid price is required", resp.data["error"]["message"])

    def test_inactive_products_hidden_unless_requested(self):
        self.milk.is_active = False
        self.milk.save()
        resp = self.client.get("/api/products/")
        self.assertEqual([row["name"] for row in resp.data], ["Sugar 1kg"])
        resp = self.client.get("/api/products/?include_inactive=true")
        self.assertEqual(len(resp.data), 2)

    def test_filters_and_search(self):
        resp = self.client.get("/api/products/?category=Dairy")
        self.assertEqual([row["name"] for row in resp.data], ["Milk 500ml"])
        resp = self.client.get("/api/products/?search=sug")
        self.assertEqual([row["name"] for row in resp.data], ["Sugar 1kg"])

    def test_low_stock(self):
        resp = self.client.get("/api/products/low-stock/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([row["name"] for row in resp.data], ["Milk 500ml"])
        self.assertTrue(resp.data[0]["is_low_stock"])

    def test_categories(self):
        resp = self.client.get("/api/products/categories/")
        self.assertEqual(resp.data, ["Dairy", "Groceries"])

    def test_stock_add_and_subtract(self):
        resp = self.client.patch(
            f"/api/products/{self.sugar.pk}/stock/", {"quantity": "2.5", "operation": "add"}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.sugar.refresh_from_db()
        self.assertEqual(self.sugar.stock_quantity, Decimal("42.5"))

        resp = self.client.patch(
            f"/api/products/{self.sugar.pk}/stock/", {"quantity": "100", "operation": "subtract"}, format="json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Insufficient stock", resp.data["error"]["message"])

    def test_stock_rejects_unknown_operation(self):
        resp = self.client.patch(
            f"/api/products/{self.sugar.pk}/stock/", {"quantity": "1", "operation": "multiply"}, format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_delete_blocked_when_product_has_sales(self):
        Sale.objects.create(
            product=self.sugar,
            product_name=self.sugar.name,
            quantity=Decimal("1"),
            unit_price=Decimal("150"),
            total=Decimal("150"),
            payment_method=Sale.PAYMENT_CASH,
        )
        resp = self.client.get(f"/api/products/{self.sugar.pk}/can-delete/")
        self.assertFalse(resp.data["can_delete"])
        resp = self.client.delete(f"/api/products/{self.sugar.pk}/")
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(Product.objects.filter(pk=self.sugar.pk).exists())

    def test_delete_product_without_sales(self):
        resp = self.client.get(f"/api/products/{self.milk.pk}/can-delete/")
        self.assertTrue(resp.data["can_delete"])
        resp = self.client.delete(f"/api/products/{self.milk.pk}/")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Product.objects.filter(pk=self.milk.pk).exists())
