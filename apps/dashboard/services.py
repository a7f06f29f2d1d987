"""Dashboard aggregates, memoised in Redis for a few minutes."""
import logging
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from apps.core.cache import get_redis_client
from apps.debts.models import Debt
from apps.debts.views import debt_summary
from apps.expenses.models import Expense
from apps.expenses.views import expense_summary, expenses_by_category
from apps.inventory.models import Product
from apps.sales.models import Sale
from apps.sales.services import debt_note
from apps.sales.views import daily_sales, sales_summary, top_selling_products

logger = logging.getLogger(__name__)

STATS_KEY = "dashboard:stats"
CHARTS_KEY = "dashboard:charts"
HIGH_EXPENSE_FACTOR = Decimal("1.5")


def plain(value):
    """Make a payload JSON-native so cached and fresh reads look the same."""
    if isinstance(value, dict):
        return {str(key): plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(item) for item in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _cached(key: str, ttl: int, compute):
    client = get_redis_client()
    cached = client.get(key)
    if cached is not None:
        logger.debug("Cache hit for %s", key)
        return cached
    data = plain(compute())
    client.set(key, data, expire=ttl)
    return data


def compute_stats(today=None) -> dict:
    today = today or timezone.localdate()
    month_start = today.replace(day=1)

    sales = sales_summary(Sale.objects.all())
    sales_today = sales_summary(Sale.objects.filter(date=today))
    sales_month = sales_summary(Sale.objects.filter(date__gte=month_start, date__lte=today))

    expenses = expense_summary(Expense.objects.all())
    expenses_today = expense_summary(Expense.objects.filter(expense_date=today))
    expenses_month = expense_summary(Expense.objects.filter(expense_date__gte=month_start, expense_date__lte=today))
    by_status = {
        status: Expense.objects.filter(status=status).aggregate(total=Sum("amount")).get("total") or Decimal("0")
        for status in (Expense.STATUS_APPROVED, Expense.STATUS_PENDING)
    }

    debts = debt_summary(Debt.objects.all())
    debts_today = debt_summary(Debt.objects.filter(created_at__date=today))

    low_stock = list(Product.objects.active().low_stock().order_by("stock_quantity"))

    return {
        "sales": {
            "total_revenue": sales["total_revenue"],
            "total_sales": sales["total_sales"],
            "cash_sales": sales["cash_sales"],
            "mpesa_sales": sales["mpesa_sales"],
            "debt_sales": sales["debt_sales"],
            "today_revenue": sales_today["total_revenue"],
            "today_sales": sales_today["total_sales"],
            "monthly_revenue": sales_month["total_revenue"],
            "monthly_sales": sales_month["total_sales"],
        },
        "expenses": {
            "total_expenses": expenses["total_amount"],
            "approved_expenses": by_status[Expense.STATUS_APPROVED],
            "pending_expenses": by_status[Expense.STATUS_PENDING],
            "today_expenses": expenses_today["total_amount"],
            "monthly_expenses": expenses_month["total_amount"],
        },
        "debts": {
            "total_outstanding": debts["outstanding_balance"],
            "total_debts": debts["total_debts"],
            "pending_debts": Debt.objects.outstanding().count(),
            "today_debts": debts_today["total_amount"],
        },
        "inventory": {
            "total_products": Product.objects.active().count(),
            "low_stock_count": len(low_stock),
            "low_stock_products": [
                {
                    "id": product.id,
                    "name": product.name,
                    "category": product.category,
                    "stock_quantity": product.stock_quantity,
                    "min_stock": product.min_stock,
                }
                for product in low_stock[:5]
            ],
        },
    }


def compute_charts() -> dict:
    payment = sales_summary(Sale.objects.all())
    return {
        "daily_sales": daily_sales(7),
        "top_products": top_selling_products(10),
        "payment_distribution": {
            "cash": payment["cash_sales"],
            "mpesa": payment["mpesa_sales"],
            "debt": payment["debt_sales"],
        },
        "expenses_by_category": expenses_by_category(),
    }


def get_stats() -> dict:
    return _cached(STATS_KEY, settings.DASHBOARD_CACHE_TTL["stats"], compute_stats)


def get_charts() -> dict:
    return _cached(CHARTS_KEY, settings.DASHBOARD_CACHE_TTL["charts"], compute_charts)


def recent_activities(limit: int = 10) -> list:
    half = (limit + 1) // 2
    activities = [
        {
            "id": sale.id,
            "type": "sale",
            "description": debt_note(sale),
            "amount": sale.total,
            "created_at": sale.created_at,
        }
        for sale in Sale.objects.order_by("-created_at")[:half]
    ]
    activities += [
        {
            "id": expense.id,
            "type": "expense",
            "description": f"Expense: {expense.description}",
            "amount": expense.amount,
            "created_at": expense.created_at,
        }
        for expense in Expense.objects.order_by("-created_at")[:half]
    ]
    activities.sort(key=lambda item: item["created_at"], reverse=True)
    return activities[:limit]


def build_alerts(today=None) -> list:
    today = today or timezone.localdate()
    now = timezone.now()
    alerts = []

    for product in Product.objects.active().low_stock().order_by("stock_quantity"):
        alerts.append(
            {
                "type": "warning",
                "title": "Low Stock Alert",
                "message": f"{product.name} is running low ({product.stock_quantity.normalize():f} remaining)",
                "created_at": now,
            }
        )

    overdue = Debt.objects.overdue(today).count()
    if overdue:
        alerts.append(
            {
                "type": "error",
                "title": "Overdue Debts",
                "message": f"{overdue} debt(s) are overdue",
                "created_at": now,
            }
        )

    today_total = Expense.objects.filter(expense_date=today).aggregate(total=Sum("amount")).get("total") or Decimal("0")
    month_total = (
        Expense.objects.filter(expense_date__gte=today.replace(day=1), expense_date__lte=today)
        .aggregate(total=Sum("amount"))
        .get("total")
        or Decimal("0")
    )
    daily_average = month_total / 30
    if month_total and today_total > daily_average * HIGH_EXPENSE_FACTOR:
        alerts.append(
            {
                "type": "warning",
                "title": "High Expenses",
                "message": f"Today's expenses ({today_total}) are above average",
                "created_at": now,
            }
        )
    return alerts
