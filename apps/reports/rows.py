"""Uniform field access over dict rows and model instances."""
from collections.abc import Mapping
from decimal import Decimal
from typing import Optional

from .currency import to_decimal
from .dates import to_local_date


def field(row, *names, default=None):
    for name in names:
        if isinstance(row, Mapping):
            value = row.get(name)
        else:
            value = getattr(row, name, None)
        if value not in (None, ""):
            return value
    return default


def amount(row, *names) -> Decimal:
    return to_decimal(field(row, *names)) or Decimal("0")


def sale_date(sale):
    return to_local_date(field(sale, "date", "created_at"))


def expense_date(expense):
    return to_local_date(field(expense, "expense_date", "date", "created_at"))


def product_key(row) -> Optional[str]:
    value = field(row, "product_id", "product")
    if value is None:
        return None
    return str(getattr(value, "pk", value))
