from django.core.management.base import BaseCommand, CommandError

from seasons.models import Season
from tours.models import TourCard


class Command(BaseCommand):
    help = "Recompute tour card statistics and positions from completed tournaments"

    def add_arguments(self, parser):
        parser.add_argument("--season", type=int, default=None, help="Season id (defaults to the current season)")

    def handle(self, *args, **options):
        if options["season"]:
            season = Season.objects.filter(pk=options["season"]).first()
        else:
            season = Season.objects.current_season()
        if season is None:
            raise CommandError("Season not found")

        result = TourCard.objects.recompute_for_season(season)
        self.stdout.write(self.style.SUCCESS("Updated %s tour cards for %s" % (result["updated"], season)))
