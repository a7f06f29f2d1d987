import psycopg2
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from psycopg2 import sql


class Command(BaseCommand):
    help = "Create the PostgreSQL database named by DB_NAME if it does not exist."

    def add_arguments(self, parser):
        parser.add_argument("--name", default=None, help="Database name (defaults to DB_NAME).")

    def _connect(self, dbname):
        return psycopg2.connect(
            host=settings.DB_HOST,
            port=settings.DB_PORT,
            user=settings.DB_USER,
            password=settings.DB_PASSWORD,
            dbname=dbname,
            connect_timeout=5,
        )

    def handle(self, *args, **options):
        name = options["name"] or settings.DB_NAME
        if not name:
            raise CommandError("DB_NAME is not set; nothing to create.")

        try:
            conn = self._connect("postgres")
        except psycopg2.OperationalError as exc:
            raise CommandError(
                f"Could not connect to PostgreSQL at {settings.DB_HOST}:{settings.DB_PORT}: {exc}"
            ) from exc

        # CREATE DATABASE cannot run inside a transaction block.
        conn.autocommit = True
        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1 FROM pg_database WHERE datname = %s", [name])
                if cursor.fetchone():
                    self.stdout.write(f'Database "{name}" already exists')
                else:
                    cursor.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(name)))
                    self.stdout.write(self.style.SUCCESS(f'Database "{name}" created'))
        finally:
            conn.close()

        try:
            conn = self._connect(name)
        except psycopg2.OperationalError as exc:
            raise CommandError(f'Could not connect to "{name}": {exc}') from exc
        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT NOW()")
                now = cursor.fetchone()[0]
        finally:
            conn.close()
        self.stdout.write(self.style.SUCCESS(f'Connected to "{name}" (server time {now})'))
