"""pg_dump backups with a simple hourly poll scheduler."""
from __future__ import annotations

import logging
import os
import subprocess
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

DAILY_BACKUP_HOUR = 2
WEEKLY_BACKUP_HOUR = 3
TICK_SECONDS = 60 * 60
CLEANUP_EVERY = timedelta(days=30)


class BackupError(Exception):
    pass


class BackupSystem:
    def __init__(self, backup_dir: Optional[Path] = None, retention_days: Optional[int] = None):
        self.backup_dir = Path(backup_dir or settings.BACKUP_DIR)
        self.retention_days = retention_days or settings.BACKUP_RETENTION_DAYS
        db = settings.DATABASES["default"]
        self.db_name = db.get("NAME")
        self.db_user = db.get("USER") or "postgres"
        self.db_host = db.get("HOST") or "localhost"
        self.db_port = str(db.get("PORT") or "5432")
        self.db_password = db.get("PASSWORD") or ""
        self.last_cleanup: Optional[datetime] = None
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def _base_command(self) -> List[str]:
        return [
            "pg_dump",
            "-h", self.db_host,
            "-p", self.db_port,
            "-U", self.db_user,
            "-d", str(self.db_name),
        ]

    def _run(self, command: List[str], stdout=None) -> None:
        env = os.environ.copy()
        if self.db_password:
            env["PGPASSWORD"] = self.db_password
        try:
            result = subprocess.run(command, stdout=stdout, stderr=subprocess.PIPE, env=env, check=False)
        except FileNotFoundError as exc:
            raise BackupError("pg_dump executable not found on PATH") from exc
        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
            raise BackupError(stderr or f"pg_dump exited with code {result.returncode}")

    def create_daily_backup(self) -> Path:
        stamp = timezone.localdate().isoformat()
        backup_file = self.backup_dir / f"daily_backup_{stamp}.sql"
        try:
            with open(backup_file, "wb") as fh:
                self._run(self._base_command(), stdout=fh)
        except BackupError:
            logger.exception("Daily backup failed")
            backup_file.unlink(missing_ok=True)
            raise
        logger.info("Daily backup created: %s", backup_file)
        return backup_file

    def create_weekly_backup(self) -> Path:
        stamp = timezone.localdate().isoformat()
        backup_file = self.backup_dir / f"weekly_backup_{stamp}.dump"
        try:
            self._run(self._base_command() + ["-Fc", "-f", str(backup_file)])
        except BackupError:
            logger.exception("Weekly backup failed")
            raise
        logger.info("Weekly backup created: %s", backup_file)
        return backup_file

    def clean_old_backups(self, days: Optional[int] = None) -> List[str]:
        cutoff = time.time() - (days or self.retention_days) * 24 * 60 * 60
        removed = []
        for path in sorted(self.backup_dir.iterdir()):
            if not path.is_file():
                continue
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed.append(path.name)
                    logger.info("Deleted old backup: %s", path.name)
            except OSError as exc:
                logger.warning("Could not remove %s: %s", path, exc)
        return removed

    def tick(self, now: Optional[datetime] = None) -> List[str]:
        """Run whatever is due at ``now``; returns the names of the jobs run."""
        now = timezone.localtime(now) if now else timezone.localtime()
        ran = []
        jobs = []
        if now.hour == DAILY_BACKUP_HOUR:
            jobs.append(("daily", self.create_daily_backup))
        # Python weekday(): Monday=0 .. Sunday=6
        if now.weekday() == 6 and now.hour == WEEKLY_BACKUP_HOUR:
            jobs.append(("weekly", self.create_weekly_backup))
        if self.last_cleanup is None:
            # the cleanup clock starts with the first tick
            self.last_cleanup = now
        elif now - self.last_cleanup >= CLEANUP_EVERY:
            jobs.append(("cleanup", self.clean_old_backups))
        for name, job in jobs:
            try:
                job()
            except BackupError:
                # already logged; the next tick tries again
                continue
            if name == "cleanup":
                self.last_cleanup = now
            ran.append(name)
        return ran

    def run_scheduler(self, tick_seconds: int = TICK_SECONDS, max_ticks: Optional[int] = None) -> None:
        logger.info("Backup scheduler started (tick every %ss, dir %s)", tick_seconds, self.backup_dir)
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            self.tick()
            ticks += 1
            if max_ticks is None or ticks < max_ticks:
                time.sleep(tick_seconds)
