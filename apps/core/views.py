import logging

from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .cache import get_redis_client

logger = logging.getLogger(__name__)


def check_database() -> dict:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as exc:
        logger.error("Database health check failed: %s", exc)
        return {"status": "down", "error": str(exc)}
    return {"status": "up", "vendor": connection.vendor}


def check_redis() -> dict:
    client = get_redis_client()
    if client.ping():
        return {"status": "up"}
    return {"status": "unavailable"}


@api_view(["GET"])
@permission_classes([AllowAny])
def health(request):
    database = check_database()
    redis_status = check_redis()
    healthy = database["status"] == "up"
    payload = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": timezone.now().isoformat(),
        "services": {"database": database, "redis": redis_status},
    }
    return Response(payload, status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE)
