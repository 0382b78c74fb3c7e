import structlog
from django.db import models, transaction

from core.audit import log_audit
from core.exceptions import ValidationFailedError

logger = structlog.get_logger(__name__)


class TeamManager(models.Manager):

    def season_standings(self, season):
        from tours.models import TourCard

        return TourCard.objects \
            .filter(season=season) \
            .select_related("member", "tour") \
            .order_by("-points", "-earnings", "display_name")

    def championships(self, member, season=None):
        from teams.utils import is_champion_position, is_championship_tournament

        teams = self.filter(tour_card__member=member) \
            .select_related("tournament", "tournament__tier", "tour_card") \
            .order_by("tournament__start_date")
        if season is not None:
            teams = teams.filter(tournament__season=season)
        return [team for team in teams
                if is_champion_position(team.position) and is_championship_tournament(team.tournament)]

    def seed_random(self, tournament, size=6, dry_run=False, tour=None, actor=None):
        """
        Create a team for every tour card in the tournament's season that does not have one,
        picking golfers from the tournament field. Picks are deterministic for a given
        tournament and tour card.
        """
        from golfers.models import TournamentGolfer
        from teams.utils import fnv1a_32, pick_unique
        from tours.models import TourCard

        if tour is not None and tour.season_id != tournament.season_id:
            raise ValidationFailedError("Tour is not in the tournament's season")

        pool = sorted(TournamentGolfer.objects
                      .filter(tournament=tournament)
                      .values_list("golfer__api_id", flat=True))
        if len(pool) < size:
            raise ValidationFailedError(f"Tournament field has {len(pool)} golfers; {size} are required")

        cards = TourCard.objects.filter(season=tournament.season_id).exclude(teams__tournament=tournament)
        if tour is not None:
            cards = cards.filter(tour=tour)

        planned = []
        for card in cards.order_by("id"):
            seed = fnv1a_32(f"{tournament.id}:{card.id}")
            try:
                golfer_ids = pick_unique(pool, size, seed)
            except ValueError as e:
                raise ValidationFailedError(str(e))
            planned.append((card, golfer_ids))

        created = 0
        if not dry_run:
            with transaction.atomic():
                for card, golfer_ids in planned:
                    self.create(tournament=tournament, tour_card=card, golfer_ids=golfer_ids)
                    created += 1
            log_audit(actor, "teams", tournament.id, "created", metadata={"seeded": created, "size": size})

        logger.info("Seeded random teams", tournament_id=tournament.id, planned=len(planned), created=created,
                    dry_run=dry_run)
        return {
            "tournament": tournament.id,
            "planned": len(planned),
            "created": created,
            "dry_run": dry_run,
            "teams": [{"tour_card": card.id, "display_name": card.display_name, "golfer_ids": golfer_ids}
                      for card, golfer_ids in planned],
        }

    def playoff_context(self, tournament, cards):
        """
        Where a playoff tournament sits in the season's playoff run and the strokes
        each tour card starts it with: a bracket ranking for the first event, the
        previous event's score after that.
        """
        from teams.scoring import playoff_starting_strokes
        from tournaments.models import Tournament

        if "playoff" not in tournament.tier.name.lower():
            return 0, {}

        playoffs = [t.id for t in Tournament.objects
                    .filter(season=tournament.season_id, tier__name__icontains="playoff")
                    .order_by("start_date", "id")]
        index = playoffs.index(tournament.id) + 1 if tournament.id in playoffs else 1
        event_index = min(3, index)

        if event_index == 1:
            starting = playoff_starting_strokes([(card.id, card.playoff, card.points) for card in cards],
                                                tournament.tier.points or [])
            return event_index, starting

        previous = playoffs[event_index - 2]
        carry_in = {tour_card_id: score or 0 for tour_card_id, score in
                    self.filter(tournament=previous).values_list("tour_card_id", "score")}
        return event_index, carry_in

    @transaction.atomic()
    def score_tournament(self, tournament, dry_run=False, actor=None):
        """
        Score every team in the tournament from its golfers' leaderboard rows, then
        place the teams and pay points and earnings from the tier's tables.
        """
        from golfers.models import TournamentGolfer
        from teams.scoring import TeamScorer
        from teams.utils import final_position

        teams = list(self.filter(tournament=tournament).select_related("tour_card").order_by("id"))
        if not teams:
            logger.info("No teams to score", tournament_id=tournament.id)
            return {"tournament": tournament.id, "updated": 0, "dry_run": dry_run, "teams": []}

        golfers = {}
        for row in TournamentGolfer.objects.filter(tournament=tournament).select_related("golfer"):
            golfers[row.golfer.api_id] = {
                "api_id": row.golfer.api_id,
                "position": row.position,
                "score": row.score,
                "today": row.today,
                "thru": row.thru,
                "round_one": row.round_one,
                "round_two": row.round_two,
                "round_three": row.round_three,
                "round_four": row.round_four,
            }

        event_index, starting_strokes = self.playoff_context(tournament, [team.tour_card for team in teams])
        scorer = TeamScorer(
            teams=[{
                "team_id": team.id,
                "tour_card_id": team.tour_card_id,
                "golfer_ids": team.golfer_ids,
                "bracket": team.tour_card.playoff,
            } for team in teams],
            golfers=golfers,
            par=tournament.course.par,
            current_round=tournament.current_round,
            live=tournament.live_play,
            event_index=event_index,
            starting_strokes=starting_strokes,
        )
        results = scorer.score(tournament.tier.points or [], tournament.tier.payouts or [])

        by_team = {team.id: team for team in teams}
        for result in results:
            team = by_team[result["team_id"]]
            position = final_position(result["position"])
            result["past_position"] = team.position
            cut = result.pop("cut")
            result["make_cut"] = not cut if scorer.round >= 3 else None
            result["top_three"] = position <= 3
            result["top_five"] = position <= 5
            result["top_ten"] = position <= 10
            result["win"] = position == 1
            if dry_run:
                continue
            for field, value in result.items():
                if field != "team_id":
                    setattr(team, field, value)
            team.save()

        if not dry_run:
            log_audit(actor, "teams", tournament.id, "updated", metadata={"scored": len(results)})
        logger.info("Teams scored", tournament_id=tournament.id, teams=len(results), event_index=event_index,
                    dry_run=dry_run)
        return {"tournament": tournament.id, "updated": 0 if dry_run else len(results), "dry_run": dry_run,
                "teams": results}
