from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.expenses.models import Expense
from apps.inventory.models import Product
from apps.sales.models import Sale

from . import charts, currency, dates, export
from .generator import ReportGenerator
from .pdf import build_pdf


class CurrencyTests(SimpleTestCase):
    def test_format_currency(self):
        self.assertEqual(currency.format_currency(1234.56), "KSh 1,234.56")
        self.assertEqual(currency.format_currency(float("nan")), "KSh 0.00")
        self.assertEqual(currency.format_currency(None), "KSh 0.00")
        self.assertEqual(currency.format_currency("abc"), "KSh 0.00")

    def test_parse_currency(self):
        self.assertEqual(currency.parse_currency("KSh 1,234.50"), Decimal("1234.50"))
        self.assertEqual(currency.parse_currency(""), Decimal("0"))
        self.assertEqual(currency.parse_currency("n/a"), Decimal("0"))

    def test_compact_currency(self):
        self.assertEqual(currency.format_compact_currency(2_500_000), "KSh 2.5M")
        self.assertEqual(currency.format_compact_currency(1500), "KSh 1.5K")
        self.assertEqual(currency.format_compact_currency(999), "KSh 999")

    def test_percentages_and_profit(self):
        self.assertEqual(currency.calculate_profit_margin(1000, 600), "40.0%")
        self.assertEqual(currency.calculate_profit_margin(0, 600), "0%")
        self.assertEqual(currency.calculate_percentage(25, 200), "12.5%")
        self.assertEqual(currency.calculate_percentage(25, 0), "0%")
        self.assertEqual(currency.calculate_profit(1000, 1200), Decimal("-200"))

    def test_amount_color(self):
        self.assertEqual(currency.get_amount_color(5), "text-success")
        self.assertEqual(currency.get_amount_color(-5), "text-danger")
        self.assertEqual(currency.get_amount_color(0), "text-muted")


class DateTests(SimpleTestCase):
    def test_days_until_due(self):
        today = timezone.localdate()
        self.assertEqual(dates.get_days_until_due(today + timedelta(days=5)), 5)
        self.assertEqual(dates.get_days_until_due((today - timedelta(days=2)).isoformat()), -2)
        self.assertIsNone(dates.get_days_until_due("not a date"))

    def test_format_date(self):
        self.assertEqual(dates.format_date("2024-01-05"), "5 Jan 2024")
        self.assertEqual(dates.format_date("garbage"), dates.INVALID_DATE)

    def test_format_datetime_uses_shop_timezone(self):
        naive = datetime(2024, 1, 15, 14, 30)
        self.assertEqual(dates.format_datetime(naive), "15 Jan 2024, 14:30")
        utc_moment = datetime(2024, 1, 15, 11, 30, tzinfo=dt_timezone.utc)
        self.assertEqual(dates.format_datetime(utc_moment), "15 Jan 2024, 14:30")
        self.assertEqual(dates.format_datetime(date(2024, 1, 15)), "15 Jan 2024, 00:00")
        self.assertEqual(dates.format_datetime("garbage"), dates.INVALID_DATE)

    def test_week_and_month_ranges(self):
        # 2024-01-03 is a Wednesday; weeks start on Sunday.
        self.assertEqual(dates.get_week_range("2024-01-03"), (date(2023, 12, 31), date(2024, 1, 6)))
        self.assertEqual(dates.get_month_range(2024, 2), (date(2024, 2, 1), date(2024, 2, 29)))

    def test_relative_checks(self):
        today = timezone.localdate()
        self.assertTrue(dates.is_today(today))
        self.assertTrue(dates.is_this_month(today))
        self.assertTrue(dates.is_this_week(today))
        self.assertFalse(dates.is_today(today - timedelta(days=1)))
        self.assertEqual(dates.add_days(date(2024, 1, 30), 2), date(2024, 2, 1))


class ReportGeneratorTests(SimpleTestCase):
    def test_weekly_report_totals(self):
        sales = [{"total": 100, "date": "2024-01-01"}, {"total": 50, "date": "2024-01-02"}]
        report = ReportGenerator(sales, []).generate_weekly_report("2024-01-01")
        self.assertEqual(report.total_revenue, Decimal("150"))
        self.assertEqual(report.total_expenses, Decimal("0"))
        self.assertEqual(report.net_profit, Decimal("150"))
        self.assertEqual(report.end, date(2024, 1, 7))

    def test_daily_report_excludes_other_days(self):
        sales = [{"total": 100, "date": "2024-01-01"}, {"total": 50, "date": "2024-01-02"}]
        expenses = [{"amount": 30, "expense_date": "2024-01-01"}]
        report = ReportGenerator(sales, expenses).generate_daily_report("2024-01-01")
        self.assertEqual(report.total_revenue, Decimal("100"))
        self.assertEqual(report.net_profit, Decimal("70"))

    def test_monthly_report_and_categories(self):
        products = [{"id": "p1", "category": "Dairy"}]
        sales = [
            {"total": 120, "date": "2024-02-10", "product_id": "p1", "product_name": "Milk", "quantity": 1},
            {"total": 80, "date": "2024-02-11", "product_id": "p9", "product_name": "Mystery", "quantity": 2},
            {"total": 999, "date": "2024-03-01", "product_id": "p1"},
        ]
        report = ReportGenerator(sales, [], products).generate_monthly_report(2024, 2)
        self.assertEqual(report.total_revenue, Decimal("200"))
        self.assertEqual(report.category_breakdown, {"Dairy": Decimal("120"), "Uncategorized": Decimal("80")})

    def test_invalid_date_raises(self):
        with self.assertRaises(ValueError):
            ReportGenerator([], []).generate_daily_report("31/12/2024")


class ChartTests(SimpleTestCase):
    def test_sales_chart_groups_and_sorts(self):
        sales = [
            {"total": 50, "date": "2024-01-02"},
            {"total": 100, "date": "2024-01-01"},
            {"total": 25, "date": "2024-01-02"},
        ]
        chart = charts.sales_chart(sales)
        self.assertEqual(chart["labels"], ["2024-01-01", "2024-01-02"])
        self.assertEqual(chart["datasets"][0]["data"], [100.0, 75.0])

    def test_weekly_and_monthly_keys(self):
        self.assertEqual(charts.period_key(date(2024, 1, 3), charts.WEEKLY), "2023-12-31")
        self.assertEqual(charts.period_key(date(2024, 1, 3), charts.MONTHLY), "2024-01")

    def test_profit_chart_colours_losses(self):
        chart = charts.profit_chart(
            [{"total": 100, "date": "2024-01-01"}], [{"amount": 150, "expense_date": "2024-01-02"}]
        )
        self.assertEqual(chart["datasets"][0]["data"], [100.0, -150.0])
        self.assertEqual(chart["datasets"][0]["backgroundColor"], [charts.GREEN, charts.RED])


class ExportTests(SimpleTestCase):
    def test_to_csv_header_and_quoting(self):
        rows = [{"Product": "Sugar, 1kg", "Qty": 0, "Note": None}, {"Product": "Rice", "Qty": 2, "Note": "ok"}]
        text = export.to_csv(rows)
        lines = text.split("\n")
        self.assertEqual(lines[0], "Product,Qty,Note")
        self.assertEqual(lines[1], '"Sugar, 1kg",0,')
        self.assertEqual(lines[2], "Rice,2,ok")
        self.assertEqual(export.to_csv([]), "")

    def test_to_csv_doubles_embedded_quotes(self):
        self.assertEqual(export.to_csv([{"Note": 'say "hi"'}]), 'Note\n"say ""hi"""')

    def test_sales_rows_defaults(self):
        rows = export.format_sales_rows([{"total": 150, "date": "2024-01-05"}])
        self.assertEqual(rows[0]["Date"], "5 Jan 2024")
        self.assertEqual(rows[0]["Total"], "KSh 150.00")
        self.assertEqual(rows[0]["Customer"], "Walk-in")

    def test_build_pdf(self):
        pdf = build_pdf(["Total revenue: KSh 150.00"], title="Zion Grocery")
        self.assertTrue(pdf.startswith(b"%PDF-1.4"))
        self.assertTrue(pdf.endswith(b"%%EOF"))
        self.assertIn(b"(Total revenue: KSh 150.00) Tj", pdf)


class ReportApiTests(APITestCase):
    def setUp(self):
        user = get_user_model().objects.create_user(username="owner", password="Grocer#2024")
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")
        product = Product.objects.create(name="Maize Flour 2kg", category="Grains", price=Decimal("210"))
        Sale.objects.create(
            product=product,
            product_name=product.name,
            quantity=Decimal("2"),
            unit_price=Decimal("210"),
            total=Decimal("420"),
            payment_method=Sale.PAYMENT_MPESA,
            date=date(2024, 1, 2),
        )
        Expense.objects.create(
            description="Delivery, Thika Road", category="Transport", amount=Decimal("120"), expense_date=date(2024, 1, 2)
        )

    def test_daily_report(self):
        resp = self.client.get("/api/reports/daily/?date=2024-01-02")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["total_revenue"], Decimal("420"))
        self.assertEqual(resp.data["net_profit"], Decimal("300"))
        self.assertEqual(resp.data["categories"]["Grains"]["count"], 1)

    def test_weekly_and_monthly_reports(self):
        resp = self.client.get("/api/reports/weekly/?start=2023-12-31")
        self.assertEqual(resp.data["end"], "2024-01-06")
        self.assertEqual(resp.data["sales_count"], 1)
        resp = self.client.get("/api/reports/monthly/?year=2024&month=1")
        self.assertEqual(resp.data["expenses_count"], 1)
        resp = self.client.get("/api/reports/monthly/?year=2024&month=13")
        self.assertEqual(resp.status_code, 400)
        resp = self.client.get("/api/reports/monthly/?year=0&month=1")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("year", resp.data["error"]["details"])

    def test_sales_csv_export(self):
        resp = self.client.get("/api/reports/export/sales.csv?date_from=2024-01-01&date_to=2024-01-31")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Disposition"], 'attachment; filename="sales_report_2024-01-31.csv"')
        lines = resp.content.decode().split("\n")
        self.assertTrue(lines[0].startswith("Date,Product,Quantity"))
        self.assertIn("Maize Flour 2kg", lines[1])

    def test_expenses_csv_quotes_commas(self):
        resp = self.client.get("/api/reports/export/expenses.csv")
        self.assertIn('"Delivery, Thika Road"', resp.content.decode())

    def test_pdf_and_html_exports(self):
        resp = self.client.get("/api/reports/export/report.pdf?type=monthly&year=2024&month=1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "application/pdf")
        self.assertTrue(resp.content.startswith(b"%PDF"))
        resp = self.client.get("/api/reports/export/report.html?type=daily&date=2024-01-02")
        self.assertContains(resp, "Delivery, Thika Road")

    def test_charts(self):
        resp = self.client.get("/api/reports/charts/?period=monthly")
        self.assertEqual(resp.data["period"], "monthly")
        self.assertEqual(resp.data["sales"]["labels"], ["2024-01"])
