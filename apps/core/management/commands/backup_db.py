from django.core.management.base import BaseCommand, CommandError

from apps.core.backup import BackupError, BackupSystem


class Command(BaseCommand):
    help = "Dump the database with pg_dump (daily SQL by default)."

    def add_arguments(self, parser):
        parser.add_argument("--weekly", action="store_true", help="Write a custom-format weekly dump.")
        parser.add_argument("--clean", action="store_true", help="Delete backups older than the retention window.")
        parser.add_argument("--days", type=int, default=None, help="Retention window for --clean.")
        parser.add_argument("--schedule", action="store_true", help="Run the hourly backup scheduler until stopped.")

    def handle(self, *args, **options):
        system = BackupSystem()

        if options["schedule"]:
            self.stdout.write("Backup scheduler running; press Ctrl+C to stop.")
            try:
                system.run_scheduler()
            except KeyboardInterrupt:
                self.stdout.write("Backup scheduler stopped.")
            return

        if options["clean"]:
            removed = system.clean_old_backups(options["days"])
            self.stdout.write(self.style.SUCCESS(f"Removed {len(removed)} old backup(s)."))
            return

        try:
            path = system.create_weekly_backup() if options["weekly"] else system.create_daily_backup()
        except BackupError as exc:
            raise CommandError(f"Backup failed: {exc}") from exc
        self.stdout.write(self.style.SUCCESS(f"Backup written to {path}"))
