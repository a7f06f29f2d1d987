from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.debts.models import Debt
from apps.inventory.models import Product

from .models import Sale


class SaleApiTests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="cashier", password="Grocer#2024")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")
        self.rice = Product.objects.create(
            name="Rice 2kg", category="Groceries", price=Decimal("320"), stock_quantity=Decimal("10")
        )
        self.oil = Product.objects.create(
            name="Cooking Oil 1L", category="Groceries", price=Decimal("280"), stock_quantity=Decimal("8")
        )

    def _sell(self, **overrides):
        payload = {"product": str(self.rice.pk), "quantity": "2", "payment_method": "cash"}
        payload.update(overrides)
        return self.client.post("/api/sales/", payload, format="json")

    def test_cash_sale_takes_stock_and_prices_from_product(self):
        resp = self._sell()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["total"], Decimal("640.00"))
        self.assertEqual(resp.data["product_name"], "Rice 2kg")
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("8"))
        sale = Sale.objects.get()
        self.assertEqual(sale.created_by, self.user)
        self.assertFalse(Debt.objects.exists())

    def test_fractional_quantity_and_custom_unit_price(self):
        resp = self._sell(quantity="0.5", unit_price="300")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["total"], Decimal("150.00"))
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("9.5"))

    def test_insufficient_stock_rejected(self):
        resp = self._sell(quantity="11")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Insufficient stock", resp.data["error"]["message"])
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("10"))
        self.assertFalse(Sale.objects.exists())

    def test_invalid_quantity_rejected(self):
        resp = self._sell(quantity="0")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Valid quantity is required", resp.data["error"]["message"])

    def test_debt_sale_requires_customer_details(self):
        resp = self._sell(payment_method="debt")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("customer_name", resp.data["error"]["details"])
        self.assertIn("customer_phone", resp.data["error"]["details"])

    def test_debt_sale_creates_linked_debt(self):
        resp = self._sell(payment_method="debt", customer_name="Mama Njeri", customer_phone="0712345678")
        self.assertEqual(resp.status_code, 201)
        debt = Debt.objects.get()
        self.assertEqual(str(debt.sale_id), str(resp.data["id"]))
        self.assertEqual(debt.amount, Decimal("640.00"))
        self.assertEqual(debt.balance, Decimal("640.00"))
        self.assertEqual(debt.status, Debt.STATUS_PENDING)
        self.assertEqual(debt.notes, "Sale: Rice 2kg (2 units)")

    def test_update_quantity_rebalances_stock(self):
        sale_id = self._sell().data["id"]
        resp = self.client.patch(f"/api/sales/{sale_id}/", {"quantity": "5"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("5"))
        self.assertEqual(resp.data["total"], Decimal("1600.00"))

        self.client.patch(f"/api/sales/{sale_id}/", {"quantity": "1"}, format="json")
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("9"))

    def test_update_product_moves_stock(self):
        sale_id = self._sell().data["id"]
        resp = self.client.patch(f"/api/sales/{sale_id}/", {"product": str(self.oil.pk)}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.rice.refresh_from_db()
        self.oil.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("10"))
        self.assertEqual(self.oil.stock_quantity, Decimal("6"))
        self.assertEqual(resp.data["product_name"], "Cooking Oil 1L")
        self.assertEqual(resp.data["total"], Decimal("560.00"))

    def test_switching_to_cash_removes_debt(self):
        sale_id = self._sell(payment_method="debt", customer_name="Otieno", customer_phone="0722000000").data["id"]
        self.assertEqual(Debt.objects.count(), 1)
        resp = self.client.patch(f"/api/sales/{sale_id}/", {"payment_method": "cash"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Debt.objects.exists())

    def test_switching_to_debt_creates_linked_debt(self):
        sale_id = self._sell().data["id"]
        self.assertFalse(Debt.objects.exists())
        resp = self.client.patch(
            f"/api/sales/{sale_id}/",
            {"payment_method": "debt", "customer_name": "Wanjiru", "customer_phone": "0733111222"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        debt = Debt.objects.get()
        self.assertEqual(str(debt.sale_id), str(sale_id))
        self.assertEqual(debt.customer_name, "Wanjiru")
        self.assertEqual(debt.amount, Decimal("640.00"))
        self.assertEqual(debt.status, Debt.STATUS_PENDING)

    def test_switching_to_debt_without_customer_rejected(self):
        sale_id = self._sell().data["id"]
        resp = self.client.patch(f"/api/sales/{sale_id}/", {"payment_method": "debt"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Debt.objects.exists())

    def test_quantity_change_updates_linked_debt(self):
        sale_id = self._sell(payment_method="debt", customer_name="Otieno", customer_phone="0722000000").data["id"]
        resp = self.client.patch(f"/api/sales/{sale_id}/", {"quantity": "3"}, format="json")
        self.assertEqual(resp.status_code, 200)
        debt = Debt.objects.get()
        self.assertEqual(debt.amount, Decimal("960.00"))
        self.assertEqual(debt.balance, Decimal("960.00"))
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("7"))

    def test_delete_restores_stock_and_removes_debt(self):
        sale_id = self._sell(payment_method="debt", customer_name="Otieno", customer_phone="0722000000").data["id"]
        resp = self.client.delete(f"/api/sales/{sale_id}/")
        self.assertEqual(resp.status_code, 204)
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.stock_quantity, Decimal("10"))
        self.assertFalse(Debt.objects.exists())
        self.assertFalse(Sale.objects.exists())

    def test_status_update(self):
        sale_id = self._sell().data["id"]
        resp = self.client.patch(f"/api/sales/{sale_id}/status/", {"status": "cancelled"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "cancelled")
        resp = self.client.patch(f"/api/sales/{sale_id}/status/", {"status": "refunded"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_list_filters_and_pagination(self):
        self._sell()
        self._sell(payment_method="mpesa", mpesa_code="QX12AB")
        resp = self.client.get("/api/sales/?payment_method=mpesa")
        self.assertEqual(len(resp.data), 1)
        resp = self.client.get("/api/sales/?page=1&page_size=1")
        self.assertEqual(resp.data["count"], 2)
        self.assertEqual(len(resp.data["results"]), 1)

    def test_date_filter_rejects_garbage(self):
        resp = self.client.get("/api/sales/?date_from=yesterday")
        self.assertEqual(resp.status_code, 400)

    def test_summary_and_daily(self):
        self._sell()
        self._sell(payment_method="mpesa", quantity="1")
        resp = self.client.get("/api/sales/summary/")
        self.assertEqual(resp.data["total_sales"], 2)
        self.assertEqual(resp.data["total_revenue"], Decimal("960.00"))
        self.assertEqual(resp.data["cash_sales"], Decimal("640.00"))
        self.assertEqual(resp.data["debt_sales"], Decimal("0.00"))

        resp = self.client.get("/api/sales/daily/?days=3")
        self.assertEqual(len(resp.data), 3)
        today = timezone.localdate()
        self.assertEqual(resp.data[-1]["date"], today.isoformat())
        self.assertEqual(resp.data[-1]["revenue"], Decimal("960.00"))
        self.assertEqual(resp.data[0]["date"], (today - timedelta(days=2)).isoformat())
        self.assertEqual(resp.data[0]["transactions"], 0)

    def test_top_products(self):
        self._sell()
        self.client.post(
            "/api/sales/", {"product": str(self.oil.pk), "quantity": "1", "payment_method": "cash"}, format="json"
        )
        resp = self.client.get("/api/sales/top-products/?limit=1")
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["product_name"], "Rice 2kg")
