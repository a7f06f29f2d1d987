import csv
import io
import json

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.template.loader import render_to_string
from django.utils import timezone

from .currency import format_currency
from .dates import format_date, format_datetime
from .generator import ReportData
from .pdf import build_pdf
from .rows import field


def to_csv(rows) -> str:
    """Header from the first row's keys; empty input gives an empty string."""
    rows = list(rows)
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(h) is None else row.get(h) for h in headers])
    return buffer.getvalue()[:-1]


def format_sales_rows(sales) -> list:
    return [
        {
            "Date": format_date(field(sale, "date", "created_at")),
            "Product": field(sale, "product_name", default="Unknown"),
            "Quantity": field(sale, "quantity", default=0),
            "Unit Price": format_currency(field(sale, "unit_price", default=0)),
            "Total": format_currency(field(sale, "total", default=0)),
            "Payment Method": field(sale, "payment_method", default="Unknown"),
            "Customer": field(sale, "customer_name", default="Walk-in"),
            "Phone": field(sale, "customer_phone", default="N/A"),
            "Status": field(sale, "status", default="completed"),
        }
        for sale in sales
    ]


def format_expense_rows(expenses) -> list:
    return [
        {
            "Date": format_date(field(expense, "expense_date", "date", "created_at")),
            "Description": field(expense, "description", default="N/A"),
            "Category": field(expense, "category", default="General"),
            "Amount": format_currency(field(expense, "amount", default=0)),
            "Receipt": field(expense, "receipt_number", default=""),
            "Status": field(expense, "status", default="pending"),
        }
        for expense in expenses
    ]


def sales_to_csv(sales) -> str:
    return to_csv(format_sales_rows(sales))


def expenses_to_csv(expenses) -> str:
    return to_csv(format_expense_rows(expenses))


def to_json(data) -> str:
    return json.dumps(data, cls=DjangoJSONEncoder, indent=2)


def report_context(report: ReportData) -> dict:
    return {
        "shop_name": settings.SHOP_NAME,
        "report": report,
        "generated_at": format_datetime(timezone.now()),
        "sales_rows": format_sales_rows(report.sales),
        "expense_rows": format_expense_rows(report.expenses),
        "profit_positive": report.net_profit >= 0,
    }


def report_to_html(report: ReportData) -> str:
    return render_to_string("reports/report_print.html", report_context(report))


def report_to_pdf(report: ReportData) -> bytes:
    lines = [
        f"{report.period} report: {format_date(report.start)} - {format_date(report.end)}",
        f"Generated: {format_datetime(timezone.now())}",
        "",
        f"Total revenue:  {format_currency(report.total_revenue)}",
        f"Total expenses: {format_currency(report.total_expenses)}",
        f"Net profit:     {format_currency(report.net_profit)}",
        "",
        "Sales",
        "Date         | Product                        | Qty       | Total            | Payment",
        "-" * 90,
    ]
    for row in format_sales_rows(report.sales):
        lines.append(
            f"{row['Date']:<12} | {str(row['Product'])[:30]:<30} | {str(row['Quantity']):<9} | "
            f"{row['Total']:<16} | {row['Payment Method']}"
        )
    lines += ["", "Expenses", "Date         | Description                    | Category        | Amount", "-" * 90]
    for row in format_expense_rows(report.expenses):
        lines.append(
            f"{row['Date']:<12} | {str(row['Description'])[:30]:<30} | {str(row['Category'])[:15]:<15} | "
            f"{row['Amount']}"
        )
    if report.category_breakdown:
        lines += ["", "Revenue by category"]
        for category, total in sorted(report.category_breakdown.items()):
            lines.append(f"  {category:<30} {format_currency(total)}")
    return build_pdf(lines, title=f"{settings.SHOP_NAME} - {report.period} Report")
