from django.core.management.base import BaseCommand, CommandError

from golfers.datagolf import DataGolfAPIError
from golfers.services import sync_golfers_from_datagolf


class Command(BaseCommand):
    help = "Upsert golfers from the DataGolf player list"

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None)
        parser.add_argument(
            "--dry-run",
            action="store_true",
            dest="dry_run",
            help="Count inserts and updates without writing",
        )

    def handle(self, *args, **options):
        try:
            result = sync_golfers_from_datagolf(dry_run=options["dry_run"], limit=options["limit"])
        except DataGolfAPIError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(
            "Fetched %(fetched)s players: %(inserted)s inserted, %(updated)s updated (dry run: %(dry_run)s)" % result
        ))
