from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.debts.models import Debt
from apps.expenses.models import Expense
from apps.inventory.models import Product
from apps.sales.models import Sale
from apps.sales.services import create_sale

from . import services


class DashboardApiTests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="owner", password="Grocer#2024")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")
        self.bread = Product.objects.create(
            name="White Bread", category="Bakery", price=Decimal("50"), stock_quantity=Decimal("20"), min_stock=10
        )
        self.tomatoes = Product.objects.create(
            name="Tomatoes 1kg", category="Vegetables", price=Decimal("80"), stock_quantity=Decimal("3"), min_stock=10
        )

    def _sell(self, product, quantity, method="cash", **extra):
        data = {"product": product, "quantity": Decimal(quantity), "payment_method": method}
        data.update(extra)
        return create_sale(data, user=self.user)

    def test_stats(self):
        self._sell(self.bread, "2")
        self._sell(self.bread, "1", "mpesa")
        self._sell(self.bread, "4", "debt", customer_name="Njoroge", customer_phone="0733000000")
        Expense.objects.create(description="Bags", category="Supplies", amount=Decimal("100"), status="approved")

        resp = self.client.get("/api/dashboard/stats/")
        self.assertEqual(resp.status_code, 200)
        sales = resp.data["sales"]
        self.assertEqual(sales["total_sales"], 3)
        self.assertEqual(sales["total_revenue"], 350.0)
        self.assertEqual(sales["cash_sales"], 100.0)
        self.assertEqual(sales["debt_sales"], 200.0)
        self.assertEqual(sales["today_sales"], 3)
        self.assertEqual(resp.data["expenses"]["approved_expenses"], 100.0)
        self.assertEqual(resp.data["expenses"]["pending_expenses"], 0.0)
        self.assertEqual(resp.data["debts"]["total_outstanding"], 200.0)
        self.assertEqual(resp.data["debts"]["pending_debts"], 1)
        inventory = resp.data["inventory"]
        self.assertEqual(inventory["low_stock_count"], 1)
        self.assertEqual(inventory["low_stock_products"][0]["name"], "Tomatoes 1kg")
        self.assertEqual(inventory["low_stock_products"][0]["id"], str(self.tomatoes.pk))

    def test_stats_served_from_cache_when_present(self):
        client = mock.Mock()
        client.get.return_value = {"sales": {"total_sales": 99}}
        with mock.patch("apps.dashboard.services.get_redis_client", return_value=client):
            resp = self.client.get("/api/dashboard/stats/")
        self.assertEqual(resp.data, {"sales": {"total_sales": 99}})
        client.set.assert_not_called()

    def test_stats_written_to_cache_on_miss(self):
        client = mock.Mock()
        client.get.return_value = None
        with mock.patch("apps.dashboard.services.get_redis_client", return_value=client):
            self.client.get("/api/dashboard/stats/")
        key, payload = client.set.call_args[0]
        self.assertEqual(key, services.STATS_KEY)
        self.assertEqual(client.set.call_args[1], {"expire": 300})
        self.assertIn("inventory", payload)

    def test_writes_invalidate_cache(self):
        with mock.patch("apps.inventory.views.invalidate_dashboard_cache") as invalidate:
            self.client.patch(
                f"/api/products/{self.bread.pk}/stock/", {"quantity": "1", "operation": "add"}, format="json"
            )
        invalidate.assert_called_once_with()

    def test_charts(self):
        self._sell(self.bread, "2")
        Expense.objects.create(description="Power", category="Utilities", amount=Decimal("500"))
        resp = self.client.get("/api/dashboard/charts/")
        self.assertEqual(len(resp.data["daily_sales"]), 7)
        self.assertEqual(resp.data["daily_sales"][-1]["revenue"], 100.0)
        self.assertEqual(resp.data["top_products"][0]["product_name"], "White Bread")
        self.assertEqual(resp.data["payment_distribution"], {"cash": 100.0, "mpesa": 0.0, "debt": 0.0})
        self.assertEqual(resp.data["expenses_by_category"][0]["category"], "Utilities")

    def test_weekly_expenses(self):
        resp = self.client.get("/api/dashboard/weekly-expenses/")
        self.assertEqual(len(resp.data["days"]), 7)

    def test_recent_activities_merge_newest_first(self):
        self._sell(self.bread, "1")
        Expense.objects.create(description="Transport", category="Transport", amount=Decimal("200"))
        resp = self.client.get("/api/dashboard/recent-activities/?limit=2")
        self.assertEqual([item["type"] for item in resp.data], ["expense", "sale"])
        self.assertEqual(resp.data[0]["description"], "Expense: Transport")
        self.assertEqual(resp.data[1]["description"], "Sale: White Bread (1 units)")

    def test_alerts(self):
        Debt.objects.create(
            customer_name="Late Payer", amount=Decimal("300"), due_date=timezone.localdate() - timedelta(days=1)
        )
        Expense.objects.create(description="Generator fuel", category="Utilities", amount=Decimal("900"))
        resp = self.client.get("/api/dashboard/alerts/")
        titles = [alert["title"] for alert in resp.data]
        self.assertIn("Low Stock Alert", titles)
        self.assertIn("Overdue Debts", titles)
        self.assertIn("High Expenses", titles)
        low = next(alert for alert in resp.data if alert["title"] == "Low Stock Alert")
        self.assertEqual(low["type"], "warning")
        self.assertIn("Tomatoes 1kg is running low (3 remaining)", low["message"])

    def test_requires_auth(self):
        self.client.credentials()
        resp = self.client.get("/api/dashboard/stats/")
        self.assertEqual(resp.status_code, 401)


class DashboardPageTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="owner", password="Grocer#2024")
        self.product = Product.objects.create(
            name="Sugar 1kg", category="Pantry", price=Decimal("130"), stock_quantity=Decimal("12"), min_stock=8
        )

    def test_pages_redirect_to_login(self):
        resp = self.client.get("/sales/")
        self.assertRedirects(resp, "/accounts/login/?next=/sales/", fetch_redirect_response=False)

    def test_login_page_renders(self):
        resp = self.client.get("/accounts/login/")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Zion Grocery")

    def test_pages_render(self):
        self.client.force_login(self.user)
        for url in ("/", "/products/", "/sales/", "/expenses/", "/debts/", "/reports/", "/reports/?type=monthly"):
            resp = self.client.get(url)
            self.assertEqual(resp.status_code, 200, url)

    def test_record_sale_from_page(self):
        self.client.force_login(self.user)
        resp = self.client.post(
            "/sales/", {"product": str(self.product.pk), "quantity": "3", "payment_method": "cash"}, follow=True
        )
        self.assertContains(resp, "Sale recorded: Sugar 1kg")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, Decimal("9"))

    def test_sale_page_reports_insufficient_stock(self):
        self.client.force_login(self.user)
        resp = self.client.post(
            "/sales/", {"product": str(self.product.pk), "quantity": "50", "payment_method": "cash"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Insufficient stock")
        self.assertFalse(Sale.objects.exists())

    def test_product_with_sales_is_deactivated_not_deleted(self):
        self.client.force_login(self.user)
        create_sale({"product": self.product, "quantity": Decimal("1"), "payment_method": "cash"}, user=self.user)
        self.client.post(f"/products/{self.product.pk}/delete/")
        self.product.refresh_from_db()
        self.assertFalse(self.product.is_active)

    def test_expense_approval_and_debt_payment(self):
        self.client.force_login(self.user)
        expense = Expense.objects.create(description="Rent", category="Rent", amount=Decimal("5000"))
        self.client.post(f"/expenses/{expense.pk}/approve/")
        expense.refresh_from_db()
        self.assertEqual(expense.status, Expense.STATUS_APPROVED)
        self.assertEqual(expense.approved_by, self.user)

        debt = Debt.objects.create(customer_name="Akinyi", amount=Decimal("400"))
        self.client.post(f"/debts/{debt.pk}/payment/", {"amount": "150", "payment_method": "cash"})
        debt.refresh_from_db()
        self.assertEqual(debt.balance, Decimal("250"))
        self.assertEqual(debt.status, Debt.STATUS_PARTIAL)

    def test_chart_data_is_embedded_as_escaped_json(self):
        self.client.force_login(self.user)
        name = "</script><script>alert(1)</script>"
        product = Product.objects.create(name=name, category="Pantry", price=Decimal("50"), stock_quantity=Decimal("5"))
        create_sale({"product": product, "quantity": Decimal("1"), "payment_method": "cash"}, user=self.user)
        for url in ("/", "/reports/"):
            resp = self.client.get(url)
            self.assertEqual(resp.status_code, 200, url)
            self.assertNotContains(resp, name)
        resp = self.client.get("/")
        self.assertContains(resp, 'id="dashboard-charts"')
        self.assertEqual(resp.context["charts"]["top_products"][0]["product_name"], name)

    def test_weekly_expenses_context_uses_plain_numbers(self):
        self.client.force_login(self.user)
        Expense.objects.create(description="Bags", category="Supplies", amount=Decimal("75.50"))
        resp = self.client.get("/")
        totals = [row["total_amount"] for row in resp.context["weekly"]["days"]]
        self.assertTrue(all(isinstance(value, float) for value in totals))
        self.assertIn(75.5, totals)
        self.assertContains(resp, 'id="weekly-expenses"')
