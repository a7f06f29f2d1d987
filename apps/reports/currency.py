"""Kenyan shilling formatting and small money arithmetic."""
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

CURRENCY_PREFIX = "KSh"
CENTS = Decimal("0.01")
_CURRENCY_CHARS = re.compile(r"[KSh,\s]")


def to_decimal(value) -> Optional[Decimal]:
    """Coerce numbers and numeric strings; ``None`` for anything not finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not number.is_finite():
        return None
    return number


def to_money(value) -> Decimal:
    number = to_decimal(value)
    if number is None:
        return Decimal("0.00")
    return number.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount) -> str:
    return f"{CURRENCY_PREFIX} {to_money(amount):,.2f}"


def parse_currency(text) -> Decimal:
    if not text:
        return Decimal("0")
    number = to_decimal(_CURRENCY_CHARS.sub("", str(text)))
    return Decimal("0") if number is None else number


def format_compact_currency(amount) -> str:
    number = to_decimal(amount)
    if number is None:
        return f"{CURRENCY_PREFIX} 0"
    if number >= 1_000_000:
        return f"{CURRENCY_PREFIX} {(number / 1_000_000).quantize(Decimal('0.1'), ROUND_HALF_UP)}M"
    if number >= 1_000:
        return f"{CURRENCY_PREFIX} {(number / 1_000).quantize(Decimal('0.1'), ROUND_HALF_UP)}K"
    return f"{CURRENCY_PREFIX} {number.quantize(Decimal('1'), ROUND_HALF_UP)}"


def _percent(numerator: Decimal, denominator: Decimal) -> str:
    value = (numerator / denominator * 100).quantize(Decimal("0.1"), ROUND_HALF_UP)
    return f"{value}%"


def calculate_percentage(value, total) -> str:
    value, total = to_decimal(value), to_decimal(total)
    if value is None or total is None or total == 0:
        return "0%"
    return _percent(value, total)


def calculate_profit(revenue, expenses) -> Decimal:
    return (to_decimal(revenue) or Decimal("0")) - (to_decimal(expenses) or Decimal("0"))


def calculate_profit_margin(revenue, expenses) -> str:
    revenue_value = to_decimal(revenue)
    if not revenue_value:
        return "0%"
    return _percent(calculate_profit(revenue, expenses), revenue_value)


def is_positive(amount) -> bool:
    number = to_decimal(amount)
    return number is not None and number > 0


def is_negative(amount) -> bool:
    number = to_decimal(amount)
    return number is not None and number < 0


def get_amount_color(amount) -> str:
    if is_positive(amount):
        return "text-success"
    if is_negative(amount):
        return "text-danger"
    return "text-muted"
