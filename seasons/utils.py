from django.utils import timezone

from core.validators import number_range


def season_errors(year, number, start_date, end_date, registration_deadline):
    errors = [
        number_range(year, 2000, 2100, "year"),
        number_range(number, 1, None, "number"),
    ]
    if start_date and end_date and end_date <= start_date:
        errors.append("end_date must be after start_date")
    if registration_deadline and end_date and registration_deadline > end_date:
        errors.append("registration_deadline must not be after end_date")
    return [error for error in errors if error]


def season_duration(season):
    if season.start_date is None or season.end_date is None:
        return 0
    return (season.end_date - season.start_date).days


def days_remaining(season, now=None):
    now = now or timezone.now()
    if season.end_date is None or season.end_date < now:
        return 0
    return (season.end_date - now).days


def season_status(season, now=None):
    now = now or timezone.now()
    if season.start_date is None or season.end_date is None:
        return None
    if now < season.start_date:
        return "upcoming"
    if now <= season.end_date:
        return "in_progress"
    return "completed"


def matches_filters(season, criteria):
    if "year" in criteria and season.year != criteria["year"]:
        return False
    if "number" in criteria and season.number != criteria["number"]:
        return False
    if "min_year" in criteria and season.year < criteria["min_year"]:
        return False
    if "max_year" in criteria and season.year > criteria["max_year"]:
        return False
    if "status" in criteria and season_status(season) != criteria["status"]:
        return False
    return True


SORT_FIELDS = {
    "year": lambda s: (s.year, s.number),
    "number": lambda s: s.number,
    "start_date": lambda s: s.start_date,
    "end_date": lambda s: s.end_date,
    "created_date": lambda s: s.created_date,
}


def enhance_season(season, include_tours=False, include_tiers=False, include_tournaments=False,
                   include_statistics=False):
    from tiers.models import Tier
    from tiers.serializers import TierSerializer
    from tournaments.models import Tournament
    from tournaments.serializers import TournamentSerializer
    from tours.models import Tour, TourCard
    from tours.serializers import TourSerializer

    extra = {
        "duration_days": season_duration(season),
        "days_remaining": days_remaining(season),
        "status": season_status(season),
    }
    if include_tours:
        extra["tours"] = TourSerializer(Tour.objects.filter(season=season), many=True).data
    if include_tiers:
        extra["tiers"] = TierSerializer(Tier.objects.filter(season=season), many=True).data
    if include_tournaments:
        tournaments = Tournament.objects.filter(season=season).order_by("start_date")
        extra["tournaments"] = TournamentSerializer(tournaments, many=True).data
    if include_statistics:
        tour_cards = TourCard.objects.filter(season=season)
        extra["statistics"] = {
            "tournament_count": Tournament.objects.filter(season=season).count(),
            "completed_tournaments": Tournament.objects.filter(season=season, status="completed").count(),
            "tour_count": Tour.objects.filter(season=season).count(),
            "tour_card_count": tour_cards.count(),
            "member_count": tour_cards.values("member").distinct().count(),
        }
    return extra
