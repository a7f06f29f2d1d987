from django.core.management.base import BaseCommand, CommandError

from apps.core.views import check_database, check_redis


class Command(BaseCommand):
    help = "Report database and Redis connectivity."

    def handle(self, *args, **options):
        database = check_database()
        redis_status = check_redis()
        self.stdout.write(f"database: {database['status']}")
        self.stdout.write(f"redis: {redis_status['status']}")
        if database["status"] != "up":
            raise CommandError(f"Database unavailable: {database.get('error')}")
        self.stdout.write(self.style.SUCCESS("System healthy."))
