from datetime import MAXYEAR, MINYEAR, date, timedelta

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.core.filters import parse_date_param
from apps.expenses.models import Expense
from apps.inventory.models import Product
from apps.sales.models import Sale

from .dates import get_month_range, week_start
from .generator import ReportData, ReportGenerator

REPORT_TYPES = ("daily", "weekly", "monthly")


def _int_param(params, name: str, default: int) -> int:
    raw = (params.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError({name: f"Invalid number: {raw}"})


def report_range(report_type: str, params) -> tuple:
    today = timezone.localdate()
    if report_type == "daily":
        day = parse_date_param(params.get("date"), "date") or today
        return day, day
    if report_type == "weekly":
        start = parse_date_param(params.get("start"), "start") or week_start(today)
        return start, start + timedelta(days=6)
    if report_type == "monthly":
        year = _int_param(params, "year", today.year)
        month = _int_param(params, "month", today.month)
        if not MINYEAR <= year <= MAXYEAR:
            raise ValidationError({"year": f"Year must be between {MINYEAR} and {MAXYEAR}"})
        if not 1 <= month <= 12:
            raise ValidationError({"month": "Month must be between 1 and 12"})
        return get_month_range(year, month)
    raise ValidationError({"type": f"Report type must be one of: {', '.join(REPORT_TYPES)}"})


def generator_for(start: date, end: date) -> ReportGenerator:
    sales = Sale.objects.filter(date__gte=start, date__lte=end).order_by("date", "created_at")
    expenses = Expense.objects.filter(expense_date__gte=start, expense_date__lte=end).order_by("expense_date")
    return ReportGenerator(sales, expenses, Product.objects.all())


def build_report(report_type: str, params) -> ReportData:
    start, end = report_range(report_type, params)
    generator = generator_for(start, end)
    if report_type == "daily":
        return generator.generate_daily_report(start)
    if report_type == "weekly":
        return generator.generate_weekly_report(start)
    return generator.generate_monthly_report(start.year, start.month)
