"""Chart.js-shaped dicts (``labels`` + ``datasets``) built from rows."""
from collections import defaultdict
from decimal import Decimal

from .dates import week_start
from .rows import amount, expense_date, field, product_key, sale_date

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
PERIODS = (DAILY, WEEKLY, MONTHLY)

GREEN = "#4CAF50"
RED = "#F44336"
BLUE = "#2196F3"
PALETTE = ["#4CAF50", "#2196F3", "#FF9800", "#F44336", "#9C27B0", "#607D8B", "#795548", "#E91E63"]


def period_key(day, period: str = DAILY) -> str:
    if period == WEEKLY:
        return week_start(day).isoformat()
    if period == MONTHLY:
        return f"{day.year}-{day.month:02d}"
    return day.isoformat()


def _group(rows, date_of, value_field: str, period: str) -> dict:
    grouped = defaultdict(lambda: Decimal("0"))
    for row in rows:
        day = date_of(row)
        if day is None:
            continue
        grouped[period_key(day, period)] += amount(row, value_field)
    return grouped


def _totals_by(rows, label_of) -> dict:
    totals = defaultdict(lambda: Decimal("0"))
    for row in rows:
        totals[label_of(row)] += amount(row, "total")
    return totals


def _chart(labels, data, **dataset) -> dict:
    return {"labels": labels, "datasets": [{"data": [float(value) for value in data], **dataset}]}


def sales_chart(sales, period: str = DAILY) -> dict:
    grouped = _group(sales, sale_date, "total", period)
    labels = sorted(grouped)
    return _chart(
        labels,
        [grouped[label] for label in labels],
        label="Sales Revenue",
        backgroundColor=GREEN,
        borderColor="#45a049",
        borderWidth=2,
    )


def expense_chart(expenses, period: str = DAILY) -> dict:
    grouped = _group(expenses, expense_date, "amount", period)
    labels = sorted(grouped)
    return _chart(
        labels,
        [grouped[label] for label in labels],
        label="Expenses",
        backgroundColor=RED,
        borderColor="#d32f2f",
        borderWidth=2,
    )


def profit_chart(sales, expenses, period: str = DAILY) -> dict:
    revenue = _group(sales, sale_date, "total", period)
    spent = _group(expenses, expense_date, "amount", period)
    labels = sorted(set(revenue) | set(spent))
    profit = [revenue.get(label, Decimal("0")) - spent.get(label, Decimal("0")) for label in labels]
    return _chart(
        labels,
        profit,
        label="Net Profit",
        backgroundColor=[GREEN if value >= 0 else RED for value in profit],
        borderColor=BLUE,
        borderWidth=2,
    )


def category_chart(sales, products) -> dict:
    categories = {str(field(p, "id")): field(p, "category") for p in products}
    totals = _totals_by(sales, lambda sale: categories.get(product_key(sale)) or "Uncategorized")
    labels = sorted(totals)
    return _chart(labels, [totals[label] for label in labels], label="Sales by Category", backgroundColor=PALETTE)


def payment_method_chart(sales) -> dict:
    totals = _totals_by(sales, lambda sale: field(sale, "payment_method", default="unknown"))
    labels = sorted(totals)
    return _chart(
        labels,
        [totals[label] for label in labels],
        label="Payment Methods",
        backgroundColor=PALETTE[: max(len(labels), 1)],
    )
