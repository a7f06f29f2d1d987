from django.conf import settings

from apps.reports.currency import CURRENCY_PREFIX


def shop(request):
    return {"shop_name": settings.SHOP_NAME, "currency_prefix": CURRENCY_PREFIX}
