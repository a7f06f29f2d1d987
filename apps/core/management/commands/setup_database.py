from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Create the database when using PostgreSQL, apply migrations and optionally seed demo data."

    def add_arguments(self, parser):
        parser.add_argument("--seed", action="store_true", help="Load sample products and the default admin user.")

    def handle(self, *args, **options):
        if settings.DATABASES["default"]["ENGINE"].endswith("postgresql"):
            call_command("create_database", stdout=self.stdout)
        call_command("migrate", interactive=False, verbosity=options.get("verbosity", 1), stdout=self.stdout)
        if options["seed"]:
            call_command("seed_demo", stdout=self.stdout)
        self.stdout.write(self.style.SUCCESS("Database setup complete."))
