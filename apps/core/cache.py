"""Thin JSON cache over redis-py.

Every call checks the connected flag first and turns Redis failures into
``None`` / ``False`` so a missing cache never breaks a request. Reconnects
and backoff are left to redis-py's own ``Retry`` policy.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_EXPIRE_SECONDS = 3600


class RedisClient:
    def __init__(self, url: Optional[str] = None):
        self.url = url
        self.client: Optional[redis.Redis] = None
        self.is_connected = False

    def connect(self) -> Optional[redis.Redis]:
        url = self.url or settings.REDIS_URL
        try:
            self.client = redis.Redis.from_url(
                url,
                socket_connect_timeout=1,
                socket_timeout=2,
                retry=Retry(ExponentialBackoff(cap=1, base=0.1), 3),
                retry_on_error=[redis.ConnectionError, redis.TimeoutError],
                health_check_interval=30,
            )
            self.client.ping()
        except redis.RedisError as exc:
            logger.error("Failed to connect to Redis at %s: %s", url, exc)
            self.client = None
            self.is_connected = False
            return None
        self.is_connected = True
        logger.info("Redis connected successfully")
        return self.client

    def _ready(self) -> bool:
        return self.is_connected and self.client is not None

    def get(self, key: str) -> Any:
        if not self._ready():
            return None
        try:
            value = self.client.get(key)
            return json.loads(value) if value else None
        except (redis.RedisError, ValueError) as exc:
            logger.error("Redis GET error for %s: %s", key, exc)
            return None

    def set(self, key: str, value: Any, expire: int = DEFAULT_EXPIRE_SECONDS) -> bool:
        if not self._ready():
            return False
        try:
            self.client.setex(key, expire, json.dumps(value, cls=DjangoJSONEncoder))
            return True
        except (redis.RedisError, TypeError) as exc:
            logger.error("Redis SET error for %s: %s", key, exc)
            return False

    def delete(self, *keys: str) -> bool:
        if not self._ready():
            return False
        try:
            self.client.delete(*keys)
            return True
        except redis.RedisError as exc:
            logger.error("Redis DEL error for %s: %s", keys, exc)
            return False

    def exists(self, key: str) -> bool:
        if not self._ready():
            return False
        try:
            return self.client.exists(key) == 1
        except redis.RedisError as exc:
            logger.error("Redis EXISTS error for %s: %s", key, exc)
            return False

    def flush_all(self) -> bool:
        if not self._ready():
            return False
        try:
            self.client.flushall()
            return True
        except redis.RedisError as exc:
            logger.error("Redis FLUSHALL error: %s", exc)
            return False

    def ping(self) -> bool:
        if not self._ready():
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError as exc:
            logger.error("Redis PING error: %s", exc)
            self.is_connected = False
            return False

    def disconnect(self) -> None:
        if self.client is not None:
            try:
                self.client.close()
            except redis.RedisError as exc:
                logger.warning("Redis close error: %s", exc)
        self.client = None
        self.is_connected = False


_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Process-wide client, connected lazily on first use when enabled."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
        if getattr(settings, "REDIS_ENABLED", True):
            _redis_client.connect()
    return _redis_client


DASHBOARD_CACHE_KEYS = ("dashboard:stats", "dashboard:charts")


def invalidate_dashboard_cache() -> None:
    get_redis_client().delete(*DASHBOARD_CACHE_KEYS)
