import logging

from django.db.models import ProtectedError
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InsufficientStock(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Insufficient stock"
    default_code = "insufficient_stock"


class ProductInUse(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = (
        "Cannot delete product that has sales records. "
        "Please deactivate the product instead or remove all associated sales first."
    )
    default_code = "product_in_use"


def _flatten(detail) -> list:
    if isinstance(detail, dict):
        messages = []
        for field, value in detail.items():
            for message in _flatten(value):
                messages.append(message if field == "non_field_errors" else f"{field}: {message}")
        return messages
    if isinstance(detail, (list, tuple)):
        messages = []
        for item in detail:
            messages.extend(_flatten(item))
        return messages
    return [str(detail)]


def error_payload(message: str, status_code: int, details=None) -> dict:
    payload = {
        "success": False,
        "error": {
            "message": message,
            "status_code": status_code,
            "status": "fail" if str(status_code).startswith("4") else "error",
            "timestamp": timezone.now().isoformat(),
        },
    }
    if details is not None:
        payload["error"]["details"] = details
    return payload


def api_exception_handler(exc, context):
    """Render every API error as ``{"success": false, "error": {...}}``."""
    if isinstance(exc, ProtectedError):
        exc = ProductInUse()

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled API error in %s", view.__class__.__name__ if view else "unknown view")
        return Response(
            error_payload("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        messages = _flatten(exc.detail)
        message = f"Validation failed: {', '.join(messages)}"
        response.data = error_payload(message, response.status_code, details=exc.detail)
    else:
        messages = _flatten(getattr(exc, "detail", str(exc)))
        response.data = error_payload(" ".join(messages), response.status_code)
    return response
