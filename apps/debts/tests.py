from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Debt, DebtPayment
from .services import record_payment


class DebtModelTests(TestCase):
    def test_status_follows_payments(self):
        debt = Debt.objects.create(customer_name="Wanjiru", amount=Decimal("1000"))
        self.assertEqual(debt.balance, Decimal("1000"))
        self.assertEqual(debt.status, Debt.STATUS_PENDING)

        record_payment(debt.pk, Decimal("400"), DebtPayment.METHOD_CASH)
        debt.refresh_from_db()
        self.assertEqual(debt.balance, Decimal("600"))
        self.assertEqual(debt.status, Debt.STATUS_PARTIAL)

        record_payment(debt.pk, Decimal("600"), DebtPayment.METHOD_MPESA, mpesa_code="QK7Y2")
        debt.refresh_from_db()
        self.assertEqual(debt.balance, Decimal("0"))
        self.assertEqual(debt.status, Debt.STATUS_PAID)
        self.assertEqual(debt.payments.count(), 2)

    def test_overpayment_clamps_balance(self):
        debt = Debt.objects.create(customer_name="Kamau", amount=Decimal("200"))
        _, debt = record_payment(debt.pk, Decimal("250"), DebtPayment.METHOD_CASH)
        self.assertEqual(debt.amount_paid, Decimal("250"))
        self.assertEqual(debt.balance, Decimal("0"))
        self.assertEqual(debt.status, Debt.STATUS_PAID)

    def test_overdue(self):
        today = timezone.localdate()
        late = Debt.objects.create(customer_name="A", amount=Decimal("50"), due_date=today - timedelta(days=1))
        Debt.objects.create(customer_name="B", amount=Decimal("50"), due_date=today + timedelta(days=3))
        Debt.objects.create(customer_name="C", amount=Decimal("50"))
        self.assertTrue(late.is_overdue)
        self.assertEqual(list(Debt.objects.overdue(today)), [late])


class DebtApiTests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="owner", password="Grocer#2024")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")
        self.debt = Debt.objects.create(customer_name="Achieng", customer_phone="0711000111", amount=Decimal("500"))

    def test_create_debt(self):
        resp = self.client.post(
            "/api/debts/", {"customer_name": "Mutua", "customer_phone": "0700", "amount": "300"}, format="json"
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["balance"], Decimal("300.00"))
        self.assertEqual(resp.data["status"], "pending")
        self.assertEqual(Debt.objects.get(customer_name="Mutua").created_by, self.user)

    def test_create_rejects_bad_amount(self):
        resp = self.client.post("/api/debts/", {"customer_name": "Mutua", "amount": "-5"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Valid debt amount is required", resp.data["error"]["message"])

    def test_payment_endpoint(self):
        resp = self.client.post(
            f"/api/debts/{self.debt.pk}/payment/", {"amount": "200", "payment_method": "mpesa"}, format="json"
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["debt"]["balance"], Decimal("300.00"))
        self.assertEqual(resp.data["debt"]["status"], "partial")
        self.assertEqual(resp.data["payment"]["received_by"], self.user.pk)

        resp = self.client.get(f"/api/debts/{self.debt.pk}/payments/")
        self.assertEqual(len(resp.data), 1)

    def test_payment_rejects_zero_and_bad_method(self):
        resp = self.client.post(
            f"/api/debts/{self.debt.pk}/payment/", {"amount": "0", "payment_method": "cash"}, format="json"
        )
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post(
            f"/api/debts/{self.debt.pk}/payment/", {"amount": "10", "payment_method": "cheque"}, format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_summary_and_grouped(self):
        Debt.objects.create(customer_name="Achieng", customer_phone="0711000111", amount=Decimal("100"))
        resp = self.client.get("/api/debts/summary/")
        self.assertEqual(resp.data["total_debts"], 2)
        self.assertEqual(resp.data["outstanding_balance"], Decimal("600.00"))

        resp = self.client.get("/api/debts/grouped/")
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["count"], 2)
        self.assertEqual(resp.data[0]["total_balance"], Decimal("600.00"))

    def test_filters(self):
        Debt.objects.create(customer_name="Baraka", amount=Decimal("80"))
        resp = self.client.get("/api/debts/?customer_name=bar")
        self.assertEqual([row["customer_name"] for row in resp.data], ["Baraka"])
        resp = self.client.get("/api/debts/?customer_phone=0711")
        self.assertEqual([row["customer_name"] for row in resp.data], ["Achieng"])

    def test_overdue_endpoint(self):
        self.debt.due_date = timezone.localdate() - timedelta(days=2)
        self.debt.save()
        resp = self.client.get("/api/debts/overdue/")
        self.assertEqual(len(resp.data), 1)
        self.assertTrue(resp.data[0]["is_overdue"])

    def test_delete(self):
        resp = self.client.delete(f"/api/debts/{self.debt.pk}/")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Debt.objects.exists())
