import logging
from decimal import Decimal

from django.db import transaction

from apps.core.exceptions import InsufficientStock

from .models import Product

logger = logging.getLogger(__name__)


def adjust_stock(product_id, delta: Decimal) -> Product:
    """Add ``delta`` (negative to take stock out) to a locked product row."""
    with transaction.atomic():
        product = Product.objects.select_for_update().get(pk=product_id)
        new_stock = product.stock_quantity + Decimal(delta)
        if new_stock < 0:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}. Available: {product.stock_quantity}"
            )
        product.stock_quantity = new_stock
        product.save(update_fields=["stock_quantity", "updated_at"])
    logger.debug("Stock for %s adjusted by %s to %s", product.name, delta, new_stock)
    return product
