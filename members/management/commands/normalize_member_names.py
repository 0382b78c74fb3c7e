from django.core.management.base import BaseCommand

from members.models import Member


class Command(BaseCommand):
    help = "Normalize member first and last names and propagate display names to tour cards"

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None)
        parser.add_argument(
            "--dry-run",
            action="store_true",
            dest="dry_run",
            help="Show what would change without saving",
        )

    def handle(self, *args, **options):
        result = Member.objects.normalize_names(dry_run=options["dry_run"], limit=options["limit"])
        self.stdout.write(self.style.SUCCESS("Normalized names: %s" % result))
