import logging
from decimal import Decimal

from django.db import transaction
from rest_framework.exceptions import ValidationError

from .models import Debt, DebtPayment

logger = logging.getLogger(__name__)


def record_payment(debt_id, amount: Decimal, payment_method: str, user=None, mpesa_code: str = "", notes: str = ""):
    """Apply a payment to a locked debt row and return ``(payment, debt)``."""
    if amount is None or amount <= 0:
        raise ValidationError("Valid payment amount is required")

    with transaction.atomic():
        debt = Debt.objects.select_for_update().get(pk=debt_id)
        payment = DebtPayment.objects.create(
            debt=debt,
            amount=amount,
            payment_method=payment_method,
            mpesa_code=mpesa_code or "",
            notes=notes or "",
            received_by=user if user is not None and user.is_authenticated else None,
        )
        debt.amount_paid = debt.amount_paid + amount
        debt.save(update_fields=["amount_paid", "updated_at"])

    logger.info(
        "Payment of %s (%s) recorded for %s; balance now %s",
        amount,
        payment_method,
        debt.customer_name,
        debt.balance,
    )
    return payment, debt
