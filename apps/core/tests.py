import json
import os
import tempfile
import time
from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from pathlib import Path
from unittest import mock

import redis
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from apps.inventory.models import Product

from .backup import BackupError, BackupSystem
from .cache import RedisClient
from .context_processors import shop
from .filters import parse_date_param, positive_int_param


class RedisClientTests(SimpleTestCase):
    def _client(self):
        client = RedisClient(url="redis://localhost:6379/0")
        client.client = mock.MagicMock()
        client.is_connected = True
        return client

    def test_disconnected_client_is_a_no_op(self):
        client = RedisClient()
        self.assertIsNone(client.get("dashboard:stats"))
        self.assertFalse(client.set("dashboard:stats", {"a": 1}))
        self.assertFalse(client.delete("dashboard:stats"))
        self.assertFalse(client.ping())

    def test_get_and_set_round_trip_json(self):
        client = self._client()
        client.client.get.return_value = json.dumps({"total": 10})
        self.assertEqual(client.get("dashboard:stats"), {"total": 10})

        self.assertTrue(client.set("dashboard:stats", {"total": 10}, expire=300))
        key, expire, payload = client.client.setex.call_args[0]
        self.assertEqual((key, expire), ("dashboard:stats", 300))
        self.assertEqual(json.loads(payload), {"total": 10})

    def test_redis_errors_are_swallowed(self):
        client = self._client()
        client.client.get.side_effect = redis.ConnectionError("gone")
        client.client.setex.side_effect = redis.ConnectionError("gone")
        self.assertIsNone(client.get("dashboard:stats"))
        self.assertFalse(client.set("dashboard:stats", {}))

    def test_connect_failure_leaves_client_disconnected(self):
        with mock.patch("apps.core.cache.redis.Redis.from_url") as from_url:
            from_url.return_value.ping.side_effect = redis.ConnectionError("refused")
            client = RedisClient(url="redis://localhost:1/0")
            self.assertIsNone(client.connect())
        self.assertFalse(client.is_connected)


class BackupSystemTests(SimpleTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.system = BackupSystem(backup_dir=Path(self.tmp.name), retention_days=30)

    def _at(self, *args):
        return timezone.make_aware(datetime(*args))

    def test_tick_runs_daily_backup_at_two(self):
        with mock.patch.object(self.system, "create_daily_backup") as daily, mock.patch.object(
            self.system, "create_weekly_backup"
        ) as weekly:
            ran = self.system.tick(self._at(2024, 1, 3, 2, 0))
        daily.assert_called_once_with()
        weekly.assert_not_called()
        self.assertEqual(ran, ["daily"])

    def test_first_tick_starts_cleanup_clock(self):
        start = self._at(2024, 1, 3, 10, 0)
        with mock.patch.object(self.system, "clean_old_backups") as clean:
            self.assertEqual(self.system.tick(start), [])
            self.assertEqual(self.system.tick(self._at(2024, 1, 20, 10, 0)), [])
            self.assertEqual(self.system.tick(self._at(2024, 2, 2, 10, 0)), ["cleanup"])
        clean.assert_called_once_with()
        self.assertEqual(self.system.last_cleanup, self._at(2024, 2, 2, 10, 0))

    def test_tick_runs_weekly_backup_on_sunday_at_three(self):
        self.system.last_cleanup = self._at(2024, 1, 6, 0, 0)
        with mock.patch.object(self.system, "create_daily_backup") as daily, mock.patch.object(
            self.system, "create_weekly_backup"
        ) as weekly:
            ran = self.system.tick(self._at(2024, 1, 7, 3, 0))
        daily.assert_not_called()
        weekly.assert_called_once_with()
        self.assertEqual(ran, ["weekly"])

    def test_cleanup_runs_again_after_thirty_days(self):
        self.system.last_cleanup = self._at(2024, 1, 1, 0, 0)
        with mock.patch.object(self.system, "clean_old_backups") as clean:
            self.assertEqual(self.system.tick(self._at(2024, 1, 20, 10, 0)), [])
            self.assertEqual(self.system.tick(self._at(2024, 2, 1, 10, 0)), ["cleanup"])
        clean.assert_called_once_with()

    def test_failed_job_does_not_stop_the_tick(self):
        self.system.last_cleanup = self._at(2024, 1, 6, 0, 0)
        with mock.patch.object(self.system, "create_daily_backup", side_effect=BackupError("disk full")):
            self.assertEqual(self.system.tick(self._at(2024, 1, 7, 2, 0)), [])

    def test_clean_old_backups_uses_mtime(self):
        old = Path(self.tmp.name) / "daily_backup_2023-01-01.sql"
        fresh = Path(self.tmp.name) / "daily_backup_2024-01-01.sql"
        old.write_text("old")
        fresh.write_text("fresh")
        stale = time.time() - 40 * 24 * 60 * 60
        os.utime(old, (stale, stale))

        removed = self.system.clean_old_backups()
        self.assertEqual(removed, [old.name])
        self.assertTrue(fresh.exists())

    def test_failed_pg_dump_removes_partial_file(self):
        result = mock.Mock(returncode=1, stderr=b"connection refused")
        with mock.patch("apps.core.backup.subprocess.run", return_value=result):
            with self.assertRaises(BackupError):
                self.system.create_daily_backup()
        self.assertEqual(list(Path(self.tmp.name).iterdir()), [])

    def test_missing_pg_dump(self):
        with mock.patch("apps.core.backup.subprocess.run", side_effect=FileNotFoundError):
            with self.assertRaisesMessage(BackupError, "pg_dump executable not found"):
                self.system.create_weekly_backup()


class FilterParamTests(SimpleTestCase):
    def test_parse_date_param(self):
        self.assertIsNone(parse_date_param(""))
        self.assertEqual(parse_date_param("2024-01-05"), date(2024, 1, 5))
        self.assertEqual(parse_date_param("2024-01-05T10:30:00"), date(2024, 1, 5))
        with self.assertRaises(ValidationError):
            parse_date_param("05/01/2024", "date_from")

    def test_positive_int_param(self):
        self.assertEqual(positive_int_param(None, default=7), 7)
        self.assertEqual(positive_int_param("abc", default=7), 7)
        self.assertEqual(positive_int_param("-3", default=7), 7)
        self.assertEqual(positive_int_param("500", default=7, maximum=365), 365)
        self.assertEqual(positive_int_param("14", default=7), 14)


class ContextProcessorTests(SimpleTestCase):
    def test_shop_context_uses_report_currency_prefix(self):
        context = shop(None)
        self.assertEqual(context["shop_name"], settings.SHOP_NAME)
        self.assertEqual(context["currency_prefix"], "KSh")


class HealthTests(APITestCase):
    def test_health_is_public(self):
        resp = self.client.get("/api/monitoring/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "healthy")
        self.assertEqual(resp.data["services"]["database"]["status"], "up")
        self.assertEqual(resp.data["services"]["redis"]["status"], "unavailable")

    def test_health_reports_database_down(self):
        with mock.patch("apps.core.views.check_database", return_value={"status": "down", "error": "refused"}):
            resp = self.client.get("/api/monitoring/health/")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.data["status"], "unhealthy")

    def test_unknown_api_route_still_404(self):
        resp = self.client.get("/api/monitoring/nope/")
        self.assertEqual(resp.status_code, 404)


class CommandTests(TestCase):
    def test_seed_demo_is_idempotent(self):
        call_command("seed_demo", stdout=StringIO())
        call_command("seed_demo", stdout=StringIO())
        self.assertEqual(Product.objects.count(), 8)
        admin = get_user_model().objects.get(username="ZionGroceries")
        self.assertTrue(admin.check_password("Zion123$"))

    def test_seed_demo_adds_samples_alongside_existing_products(self):
        Product.objects.create(name="Maize Flour 2kg", category="Grains", price=Decimal("150"))
        Product.objects.create(name="Milk 1L", category="Dairy", price=Decimal("125"))
        call_command("seed_demo", stdout=StringIO())
        self.assertEqual(Product.objects.count(), 9)
        self.assertTrue(Product.objects.filter(name="Onions 1kg").exists())
        self.assertEqual(Product.objects.get(name="Milk 1L").price, Decimal("125"))

    def test_check_health(self):
        out = StringIO()
        call_command("check_health", stdout=out)
        self.assertIn("database: up", out.getvalue())
        self.assertIn("redis: unavailable", out.getvalue())
