from dataclasses import dataclass, field as dc_field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List

from . import charts
from .dates import get_month_range, to_local_date
from .rows import amount, expense_date, field, product_key, sale_date

UNCATEGORIZED = "Uncategorized"
UNKNOWN_PRODUCT = "Unknown Product"


def _within(rows, date_of, start: date, end: date) -> list:
    selected = []
    for row in rows:
        day = date_of(row)
        if day is not None and start <= day <= end:
            selected.append(row)
    return selected


@dataclass
class ReportData:
    period: str
    start: date
    end: date
    sales: List[Any] = dc_field(default_factory=list)
    expenses: List[Any] = dc_field(default_factory=list)
    total_revenue: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    category_breakdown: Dict[str, Decimal] = dc_field(default_factory=dict)

    def as_dict(self, include_rows: bool = False) -> dict:
        data = {
            "period": self.period,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "total_revenue": self.total_revenue,
            "total_expenses": self.total_expenses,
            "net_profit": self.net_profit,
            "sales_count": len(self.sales),
            "expenses_count": len(self.expenses),
            "category_breakdown": self.category_breakdown,
        }
        if include_rows:
            data["sales"] = self.sales
            data["expenses"] = self.expenses
        return data


class ReportGenerator:
    """Period reports computed in memory from sales, expenses and products."""

    def __init__(self, sales, expenses, products=()):
        self.sales = list(sales)
        self.expenses = list(expenses)
        self.products = list(products)
        self._categories = {str(field(p, "id")): field(p, "category") for p in self.products}

    def generate_daily_report(self, day) -> ReportData:
        day = self._require_date(day)
        return self._build("Daily", day, day)

    def generate_weekly_report(self, start) -> ReportData:
        start = self._require_date(start)
        return self._build("Weekly", start, start + timedelta(days=6))

    def generate_monthly_report(self, year: int, month: int) -> ReportData:
        start, end = get_month_range(int(year), int(month))
        return self._build("Monthly", start, end)

    def generate_category_breakdown(self, sales=None) -> Dict[str, dict]:
        sales = self.sales if sales is None else sales
        breakdown: Dict[str, dict] = {}
        for sale in sales:
            category = self.category_for(sale)
            bucket = breakdown.setdefault(category, {"total": Decimal("0"), "count": 0, "products": {}})
            total = amount(sale, "total")
            bucket["total"] += total
            bucket["count"] += 1

            name = field(sale, "product_name", default=UNKNOWN_PRODUCT)
            product = bucket["products"].setdefault(
                name, {"quantity": Decimal("0"), "revenue": Decimal("0"), "transactions": 0}
            )
            product["quantity"] += amount(sale, "quantity")
            product["revenue"] += total
            product["transactions"] += 1
        return breakdown

    def generate_payment_method_breakdown(self, sales=None) -> dict:
        return charts.payment_method_chart(self.sales if sales is None else sales)

    def category_for(self, sale) -> str:
        key = product_key(sale)
        return self._categories.get(key) or UNCATEGORIZED

    def _require_date(self, value) -> date:
        day = to_local_date(value)
        if day is None:
            raise ValueError(f"Invalid date: {value!r}")
        return day

    def _build(self, period: str, start: date, end: date) -> ReportData:
        sales = _within(self.sales, sale_date, start, end)
        expenses = _within(self.expenses, expense_date, start, end)
        total_revenue = sum((amount(s, "total") for s in sales), Decimal("0"))
        total_expenses = sum((amount(e, "amount") for e in expenses), Decimal("0"))
        breakdown = self.generate_category_breakdown(sales)
        return ReportData(
            period=period,
            start=start,
            end=end,
            sales=sales,
            expenses=expenses,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_profit=total_revenue - total_expenses,
            category_breakdown={name: data["total"] for name, data in breakdown.items()},
        )
