from django.utils import timezone

from core.validators import collect_errors, number_range, string_length, valid_url


def get_calculated_status(start_date, end_date, status=None, now=None):
    """
    Status implied by the tournament dates. A cancelled tournament stays cancelled.
    """
    if status == "cancelled":
        return "cancelled"
    now = now or timezone.now()
    if now < start_date:
        return "upcoming"
    if now <= end_date:
        return "active"
    return "completed"


def validate_tournament_data(data):
    errors = [
        string_length(data.get("name"), 3, 100, "Tournament name"),
        number_range(data.get("current_round"), 1, 5, "current_round"),
        valid_url(data.get("logo_url"), "logo_url"),
    ]
    if not (data.get("name") or "").strip():
        errors.append("Tournament name is required")
    start_date, end_date = data.get("start_date"), data.get("end_date")
    if start_date and end_date and end_date <= start_date:
        errors.append("end_date must be after start_date")
    collect_errors(*errors)


def matches_filters(tournament, criteria):
    for field in ("season", "tier", "course"):
        if field in criteria and getattr(tournament, f"{field}_id") != criteria[field]:
            return False
    if "status" in criteria and tournament.status != criteria["status"]:
        return False
    if "live_play" in criteria and tournament.live_play != criteria["live_play"]:
        return False
    if "current_round" in criteria and tournament.current_round != criteria["current_round"]:
        return False
    if "start_after" in criteria and tournament.start_date < criteria["start_after"]:
        return False
    if "start_before" in criteria and tournament.start_date > criteria["start_before"]:
        return False
    if "has_teams" in criteria and tournament.teams.exists() != criteria["has_teams"]:
        return False

    search_term = (criteria.get("search_term") or "").lower()
    if search_term and search_term not in tournament.name.lower():
        return False

    return True


SORT_FIELDS = {
    "name": lambda t: t.name.lower(),
    "start_date": lambda t: t.start_date,
    "end_date": lambda t: t.end_date,
    "status": lambda t: t.status,
    "current_round": lambda t: t.current_round,
    "created_date": lambda t: t.created_date,
}


def tournament_statistics(tournament):
    teams = list(tournament.teams.select_related("tour_card"))
    scores = [team.score for team in teams if team.score is not None]
    leader = min((team for team in teams if team.score is not None), key=lambda t: t.score, default=None)
    return {
        "team_count": len(teams),
        "golfer_count": tournament.golfers.count(),
        "average_team_score": round(sum(scores) / len(scores), 2) if scores else None,
        "leader": {
            "team_id": leader.id,
            "tour_card_id": leader.tour_card_id,
            "display_name": leader.tour_card.display_name,
            "score": leader.score,
        } if leader is not None else None,
    }


def enhance_tournament(tournament, include_season=False, include_tier=False, include_course=False,
                       include_teams=False, include_golfers=False, include_statistics=False):
    from courses.serializers import CourseSerializer
    from golfers.serializers import TournamentGolferSerializer
    from seasons.serializers import SeasonSerializer
    from teams.serializers import TeamSerializer
    from tiers.serializers import TierSerializer

    extra = {"calculated_status": get_calculated_status(tournament.start_date, tournament.end_date,
                                                        tournament.status)}
    if include_season:
        extra["season_detail"] = SeasonSerializer(tournament.season).data
    if include_tier:
        extra["tier_detail"] = TierSerializer(tournament.tier).data
    if include_course:
        extra["course_detail"] = CourseSerializer(tournament.course).data
    if include_teams:
        teams = tournament.teams.order_by("score", "id")
        extra["teams"] = TeamSerializer(teams, many=True).data
    if include_golfers:
        golfers = tournament.golfers.select_related("golfer").order_by("position", "id")
        extra["golfers"] = TournamentGolferSerializer(golfers, many=True).data
    if include_statistics:
        extra["statistics"] = tournament_statistics(tournament)
    return extra


def points_before_tournament(tour_card_id, tournament):
    from django.db.models import Sum
    from teams.models import Team

    total = Team.objects \
        .filter(tour_card_id=tour_card_id, tournament__season_id=tournament.season_id,
                tournament__start_date__lt=tournament.start_date) \
        .aggregate(total=Sum("points"))["total"]
    return total or 0
