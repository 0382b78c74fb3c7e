from django.core.management.base import BaseCommand, CommandError

from teams.models import Team
from tournaments.models import Tournament


class Command(BaseCommand):
    help = "Score, place and pay the teams of a tournament from its golfers' leaderboard rows"

    def add_arguments(self, parser):
        parser.add_argument("tournament", type=int, help="Tournament id")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            dest="dry_run",
            help="Report the results without writing",
        )

    def handle(self, *args, **options):
        tournament = Tournament.objects.filter(pk=options["tournament"]).first()
        if tournament is None:
            raise CommandError("Tournament not found")

        result = Team.objects.score_tournament(tournament, dry_run=options["dry_run"])
        for team in result["teams"]:
            self.stdout.write(
                "%(team_id)s: %(position)s score %(score)s points %(points)s earnings %(earnings)s" % team)
        self.stdout.write(self.style.SUCCESS("Scored %s teams for %s (dry run: %s)" % (
            len(result["teams"]), tournament.name, result["dry_run"])))
