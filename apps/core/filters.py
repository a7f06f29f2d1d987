from datetime import date
from typing import Optional

from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.exceptions import ValidationError


def parse_date_param(value: Optional[str], name: str = "date") -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp; blank means no filter."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        try:
            moment = parse_datetime(value)
        except ValueError:
            moment = None
        if moment is None:
            raise ValidationError({name: f"Invalid date: {value}"})
        parsed = moment.date()
    return parsed


def filter_date_range(queryset, params, field: str):
    """Apply inclusive ``date_from`` / ``date_to`` query params to a date field."""
    date_from = parse_date_param(params.get("date_from"), "date_from")
    date_to = parse_date_param(params.get("date_to"), "date_to")
    if date_from:
        queryset = queryset.filter(**{f"{field}__gte": date_from})
    if date_to:
        queryset = queryset.filter(**{f"{field}__lte": date_to})
    return queryset


def positive_int_param(value, default: int, maximum: int = 1000) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    return min(number, maximum)