"""Date helpers pinned to the shop's timezone (Africa/Nairobi).

Inputs may be ``date`` / ``datetime`` objects or ISO strings. Weeks start on
Sunday, matching the report and chart grouping.
"""
import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from django.utils import dateformat, timezone
from django.utils.dateparse import parse_date, parse_datetime

logger = logging.getLogger(__name__)

INVALID_DATE = "Invalid Date"
DATE_FORMAT = "j M Y"
DATETIME_FORMAT = "j M Y, H:i"

DateLike = Union[date, datetime, str]


def _parse(value) -> Optional[Union[date, datetime]]:
    if isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        day = parse_date(text)
        if day is not None:
            return day
        return parse_datetime(text)
    except ValueError:
        return None


def _local(moment: datetime) -> datetime:
    if timezone.is_naive(moment):
        return timezone.make_aware(moment)
    return timezone.localtime(moment)


def to_local_date(value) -> Optional[date]:
    parsed = _parse(value)
    if parsed is None:
        return None
    if isinstance(parsed, datetime):
        return _local(parsed).date()
    return parsed


def format_date(value) -> str:
    day = to_local_date(value)
    if day is None:
        logger.debug("Could not format date %r", value)
        return INVALID_DATE
    return dateformat.format(day, DATE_FORMAT)


def format_datetime(value) -> str:
    parsed = _parse(value)
    if parsed is None:
        return INVALID_DATE
    if not isinstance(parsed, datetime):
        parsed = datetime.combine(parsed, datetime.min.time())
    return dateformat.format(_local(parsed), DATETIME_FORMAT)


def week_start(value) -> Optional[date]:
    """Sunday on or before ``value``."""
    day = to_local_date(value)
    if day is None:
        return None
    # isoweekday(): Monday=1 .. Sunday=7
    return day - timedelta(days=day.isoweekday() % 7)


def get_week_range(value) -> Tuple[date, date]:
    start = week_start(value)
    if start is None:
        raise ValueError(f"Invalid date: {value!r}")
    return start, start + timedelta(days=6)


def get_month_range(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def is_today(value) -> bool:
    return to_local_date(value) == timezone.localdate()


def is_this_week(value) -> bool:
    day = to_local_date(value)
    if day is None:
        return False
    start, end = get_week_range(timezone.localdate())
    return start <= day <= end


def is_this_month(value) -> bool:
    day = to_local_date(value)
    today = timezone.localdate()
    return day is not None and (day.year, day.month) == (today.year, today.month)


def get_days_until_due(value) -> Optional[int]:
    due = to_local_date(value)
    if due is None:
        return None
    return (due - timezone.localdate()).days


def add_days(value, days: int):
    parsed = _parse(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed + timedelta(days=days)
