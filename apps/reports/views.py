import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.core.filters import filter_date_range, parse_date_param
from apps.expenses.models import Expense
from apps.inventory.models import Product
from apps.sales.models import Sale

from . import charts, export
from .generator import ReportGenerator
from .services import build_report

logger = logging.getLogger(__name__)


def _report_payload(report, request) -> dict:
    data = report.as_dict()
    generator = ReportGenerator(report.sales, report.expenses, Product.objects.all())
    data["categories"] = generator.generate_category_breakdown()
    data["payment_methods"] = generator.generate_payment_method_breakdown()
    if request.query_params.get("include_rows", "").lower() == "true":
        data["sales"] = export.format_sales_rows(report.sales)
        data["expenses"] = export.format_expense_rows(report.expenses)
    return data


@api_view(["GET"])
def daily_report(request):
    return Response(_report_payload(build_report("daily", request.query_params), request))


@api_view(["GET"])
def weekly_report(request):
    return Response(_report_payload(build_report("weekly", request.query_params), request))


@api_view(["GET"])
def monthly_report(request):
    return Response(_report_payload(build_report("monthly", request.query_params), request))


@api_view(["GET"])
def report_charts(request):
    params = request.query_params
    period = params.get("period", charts.DAILY).strip().lower()
    if period not in charts.PERIODS:
        period = charts.DAILY
    sales = filter_date_range(Sale.objects.all(), params, "date")
    expenses = filter_date_range(Expense.objects.all(), params, "expense_date")
    products = Product.objects.all()
    return Response(
        {
            "period": period,
            "sales": charts.sales_chart(sales, period),
            "expenses": charts.expense_chart(expenses, period),
            "profit": charts.profit_chart(sales, expenses, period),
            "categories": charts.category_chart(sales, products),
            "payment_methods": charts.payment_method_chart(sales),
        }
    )


def _attachment(content, content_type: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


def _stamp(request) -> str:
    return (parse_date_param(request.query_params.get("date_to")) or timezone.localdate()).isoformat()


@api_view(["GET"])
def export_sales_csv(request):
    sales = filter_date_range(Sale.objects.all(), request.query_params, "date").order_by("date", "created_at")
    logger.info("Exporting %s sales to CSV", sales.count())
    return _attachment(export.sales_to_csv(sales), "text/csv; charset=utf-8", f"sales_report_{_stamp(request)}.csv")


@api_view(["GET"])
def export_expenses_csv(request):
    expenses = filter_date_range(Expense.objects.all(), request.query_params, "expense_date").order_by("expense_date")
    return _attachment(
        export.expenses_to_csv(expenses), "text/csv; charset=utf-8", f"expenses_report_{_stamp(request)}.csv"
    )


def _report_type(request) -> str:
    return (request.query_params.get("type") or "monthly").strip().lower()


@api_view(["GET"])
def export_report_json(request):
    report = build_report(_report_type(request), request.query_params)
    payload = report.as_dict()
    payload["sales"] = export.format_sales_rows(report.sales)
    payload["expenses"] = export.format_expense_rows(report.expenses)
    filename = f"{report.period.lower()}_report_{report.start.isoformat()}.json"
    return _attachment(export.to_json(payload), "application/json", filename)


@api_view(["GET"])
def export_report_pdf(request):
    report = build_report(_report_type(request), request.query_params)
    filename = f"{report.period.lower()}_report_{report.start.isoformat()}.pdf"
    return _attachment(export.report_to_pdf(report), "application/pdf", filename)


@api_view(["GET"])
def export_report_html(request):
    report = build_report(_report_type(request), request.query_params)
    return HttpResponse(export.report_to_html(report))
