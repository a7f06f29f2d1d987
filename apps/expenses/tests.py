from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Expense
from .views import monthly_expenses, weekly_expenses


class ExpenseAggregateTests(TestCase):
    def test_weekly_expenses_zero_fills_monday_to_sunday(self):
        wednesday = date(2024, 1, 3)
        Expense.objects.create(description="Transport", category="Transport", amount=Decimal("300"), expense_date=wednesday)
        Expense.objects.create(description="Bags", category="Supplies", amount=Decimal("120"), expense_date=wednesday)
        Expense.objects.create(description="Old", category="Supplies", amount=Decimal("999"), expense_date=date(2023, 12, 31))

        data = weekly_expenses(today=wednesday)
        self.assertEqual(data["week"], {"start": "2024-01-01", "end": "2024-01-07"})
        self.assertEqual(len(data["days"]), 7)
        self.assertEqual(data["days"][2]["total_amount"], Decimal("420.00"))
        self.assertEqual(data["days"][2]["total_expenses"], 2)
        self.assertEqual(data["days"][0]["total_amount"], Decimal("0.00"))

    def test_monthly_expenses_groups_by_month(self):
        today = date(2024, 3, 15)
        Expense.objects.create(description="Rent", category="Rent", amount=Decimal("5000"), expense_date=date(2024, 1, 5))
        Expense.objects.create(description="Rent", category="Rent", amount=Decimal("5000"), expense_date=date(2024, 3, 5))
        Expense.objects.create(description="Power", category="Utilities", amount=Decimal("800"), expense_date=date(2024, 3, 9))
        Expense.objects.create(description="Rent", category="Rent", amount=Decimal("5000"), expense_date=date(2023, 12, 5))

        rows = monthly_expenses(3, today=today)
        self.assertEqual([row["month"] for row in rows], ["2024-01", "2024-03"])
        self.assertEqual(rows[1]["total_amount"], Decimal("5800.00"))
        self.assertEqual(rows[1]["total_expenses"], 2)


class ExpenseApiTests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="owner", password="Grocer#2024")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def _create(self, **overrides):
        payload = {"description": "Shop rent", "category": "Rent", "amount": "15000", "expense_date": "2024-01-10"}
        payload.update(overrides)
        return self.client.post("/api/expenses/", payload, format="json")

    def test_create_expense_defaults_to_pending(self):
        resp = self._create()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["status"], "pending")
        self.assertEqual(Expense.objects.get().created_by, self.user)

    def test_create_requires_positive_amount(self):
        resp = self._create(amount="0")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Valid expense amount is required", resp.data["error"]["message"])

    def test_approve_and_reject(self):
        expense_id = self._create().data["id"]
        resp = self.client.patch(f"/api/expenses/{expense_id}/approve/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "approved")
        self.assertEqual(resp.data["approved_by"], self.user.pk)
        self.assertIsNotNone(resp.data["approved_at"])

        resp = self.client.patch(f"/api/expenses/{expense_id}/approve/")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Expense is already approved", resp.data["error"]["message"])

        resp = self.client.patch(f"/api/expenses/{expense_id}/reject/")
        self.assertEqual(resp.data["status"], "rejected")

    def test_list_filters(self):
        self._create()
        self._create(description="Electricity token", category="Utilities", amount="1500", expense_date="2024-02-01")
        resp = self.client.get("/api/expenses/?category=Utilities")
        self.assertEqual([row["description"] for row in resp.data], ["Electricity token"])
        resp = self.client.get("/api/expenses/?date_from=2024-01-01&date_to=2024-01-31")
        self.assertEqual([row["description"] for row in resp.data], ["Shop rent"])
        resp = self.client.get("/api/expenses/?search=token")
        self.assertEqual(len(resp.data), 1)

    def test_summary_and_categories(self):
        self._create()
        self._create(description="Electricity", category="Utilities", amount="1500")
        resp = self.client.get("/api/expenses/summary/")
        self.assertEqual(resp.data["total_expenses"], 2)
        self.assertEqual(resp.data["total_amount"], Decimal("16500.00"))
        resp = self.client.get("/api/expenses/categories/")
        self.assertEqual(resp.data[0]["category"], "Rent")
        self.assertEqual(resp.data[1]["total_amount"], Decimal("1500.00"))

    def test_monthly_endpoint(self):
        resp = self.client.get("/api/expenses/monthly/?months=2")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, [])

    def test_delete(self):
        expense_id = self._create().data["id"]
        resp = self.client.delete(f"/api/expenses/{expense_id}/")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Expense.objects.exists())
