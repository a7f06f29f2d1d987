from django import template

from apps.reports.currency import format_compact_currency, format_currency, get_amount_color
from apps.reports.dates import format_date, format_datetime

register = template.Library()


@register.filter
def ksh(value):
    return format_currency(value)


@register.filter
def ksh_compact(value):
    return format_compact_currency(value)


@register.filter
def amount_color(value):
    return get_amount_color(value)


@register.filter
def kdate(value):
    return format_date(value)


@register.filter
def kdatetime(value):
    return format_datetime(value)


@register.filter
def get_item(mapping, key):
    if not mapping:
        return ""
    return mapping.get(key, "")
