import logging
import time

from django.conf import settings
from django.shortcuts import redirect, resolve_url

logger = logging.getLogger(__name__)

EXEMPT_PREFIXES = (
    "/accounts/login/",
    "/accounts/logout/",
    "/api/",
    "/admin/",
    "/static/",
    "/media/",
)


class LoginRequiredMiddleware:
    """Dashboard pages need a session; the API authenticates on its own."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path
        login_url = resolve_url(getattr(settings, "LOGIN_URL", "/accounts/login/"))
        if request.user.is_authenticated or path.startswith(EXEMPT_PREFIXES) or path.startswith(login_url):
            return self.get_response(request)
        return redirect(f"{login_url}?next={path}")


class SlowRequestLoggingMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response
        self.threshold_ms = getattr(settings, "SLOW_REQUEST_MS", 2000)

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = int((time.monotonic() - started) * 1000)
        if duration_ms > self.threshold_ms:
            logger.warning("Slow request: %s %s - %sms", request.method, request.path, duration_ms)
        if response.status_code >= 500:
            logger.error("Server error: %s %s -> %s", request.method, request.path, response.status_code)
        return response
