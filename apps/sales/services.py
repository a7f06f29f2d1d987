"""Sale writes that must move stock and the linked debt in one transaction."""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from apps.core.exceptions import InsufficientStock
from apps.debts.models import Debt
from apps.inventory.models import Product

from .models import Sale

logger = logging.getLogger(__name__)

SALE_FIELDS = (
    "product",
    "quantity",
    "unit_price",
    "payment_method",
    "customer_name",
    "customer_phone",
    "mpesa_code",
    "status",
    "notes",
    "date",
)


def _format_quantity(quantity: Decimal) -> str:
    text = f"{quantity:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def debt_note(sale: Sale) -> str:
    return f"Sale: {sale.product_name} ({_format_quantity(sale.quantity)} units)"


def _lock_product(product_id) -> Product:
    return Product.objects.select_for_update().get(pk=product_id)


def _take_stock(product: Product, quantity: Decimal) -> None:
    if product.stock_quantity < quantity:
        raise InsufficientStock(f"Insufficient stock for {product.name}. Available: {product.stock_quantity}")
    Product.objects.filter(pk=product.pk).update(stock_quantity=F("stock_quantity") - quantity)


def _return_stock(product_id, quantity: Decimal) -> None:
    if quantity > 0:
        Product.objects.filter(pk=product_id).update(stock_quantity=F("stock_quantity") + quantity)


def _create_debt(sale: Sale) -> Debt:
    return Debt.objects.create(
        sale=sale,
        customer_name=sale.customer_name,
        customer_phone=sale.customer_phone,
        amount=sale.total,
        notes=debt_note(sale),
        created_by=sale.created_by,
    )


def _sync_debt(sale: Sale) -> None:
    debt = sale.debts.first()
    if debt and not sale.is_debt:
        sale.debts.all().delete()
    elif sale.is_debt and debt is None:
        _create_debt(sale)
    elif sale.is_debt:
        debt.customer_name = sale.customer_name
        debt.customer_phone = sale.customer_phone
        debt.amount = sale.total
        debt.notes = debt_note(sale)
        debt.save()


def create_sale(data: dict, user=None) -> Sale:
    with transaction.atomic():
        product = _lock_product(data["product"].pk)
        quantity = data["quantity"]
        _take_stock(product, quantity)

        unit_price = data.get("unit_price") or product.price
        sale = Sale(
            product=product,
            product_name=product.name,
            quantity=quantity,
            unit_price=unit_price,
            total=(quantity * unit_price).quantize(Decimal("0.01")),
            created_by=user if user is not None and user.is_authenticated else None,
        )
        for field in SALE_FIELDS:
            if field in data and field not in ("product", "quantity", "unit_price"):
                setattr(sale, field, data[field])
        sale.save()

        if sale.is_debt:
            _create_debt(sale)

    logger.info("Sale %s recorded: %s x %s (%s)", sale.pk, sale.product_name, quantity, sale.payment_method)
    return sale


def update_sale(sale: Sale, data: dict) -> Sale:
    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        old_product_id = sale.product_id
        old_quantity = sale.quantity

        new_product = data.get("product", sale.product)
        new_quantity = data.get("quantity", old_quantity)

        if new_product.pk != old_product_id:
            _return_stock(old_product_id, old_quantity)
            product = _lock_product(new_product.pk)
            _take_stock(product, new_quantity)
            sale.product = product
            sale.product_name = product.name
            if "unit_price" not in data:
                sale.unit_price = product.price
        elif new_quantity != old_quantity:
            product = _lock_product(old_product_id)
            diff = new_quantity - old_quantity
            if diff > 0:
                _take_stock(product, diff)
            else:
                _return_stock(old_product_id, -diff)

        for field in SALE_FIELDS:
            if field in data and field != "product":
                setattr(sale, field, data[field])
        sale.total = (sale.quantity * sale.unit_price).quantize(Decimal("0.01"))
        sale.save()

        _sync_debt(sale)

    logger.info("Sale %s updated", sale.pk)
    return sale


def delete_sale(sale: Sale) -> None:
    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        sale_id, product_id, quantity = sale.pk, sale.product_id, sale.quantity
        _, removed = sale.debts.all().delete()
        debts_removed = removed.get("debts.Debt", 0)
        sale.delete()
        if quantity <= 0:
            logger.warning("Sale %s had non-positive quantity %s; stock not restored", sale_id, quantity)
        _return_stock(product_id, quantity)
    logger.info(
        "Sale %s deleted; restored %s units to product %s, removed %s debt row(s)",
        sale_id,
        quantity,
        product_id,
        debts_removed,
    )
