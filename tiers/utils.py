from core.validators import collect_errors, integer_list, string_length


def validate_tier_data(data, partial=False):
    errors = []
    if not partial or "name" in data:
        errors.append(string_length(data.get("name") or "", 3, 100, "Tier name"))
    if not partial or "payouts" in data:
        errors.append(integer_list(data.get("payouts") or [], "payouts"))
    if not partial or "points" in data:
        errors.append(integer_list(data.get("points") or [], "points"))

    payouts = data.get("payouts")
    points = data.get("points")
    if isinstance(payouts, list) and isinstance(points, list) and payouts and points \
            and len(payouts) != len(points):
        errors.append("payouts and points must have the same number of levels")
    collect_errors(*errors)


def total_payouts(tier):
    return sum(tier.payouts or [])


def total_points(tier):
    return sum(tier.points or [])


def is_playoff_tier(tier):
    return tier is not None and "playoff" in (tier.name or "").lower()


def matches_filters(tier, criteria):
    if "season" in criteria and tier.season_id != criteria["season"]:
        return False
    if "name" in criteria and tier.name != criteria["name"]:
        return False

    payouts = total_payouts(tier)
    if "min_payouts" in criteria and payouts < criteria["min_payouts"]:
        return False
    if "max_payouts" in criteria and payouts > criteria["max_payouts"]:
        return False

    points = total_points(tier)
    if "min_points" in criteria and points < criteria["min_points"]:
        return False
    if "max_points" in criteria and points > criteria["max_points"]:
        return False

    if "payout_levels" in criteria and len(tier.payouts or []) != criteria["payout_levels"]:
        return False
    if "point_levels" in criteria and len(tier.points or []) != criteria["point_levels"]:
        return False

    search_term = criteria.get("search_term")
    if search_term and search_term.lower() not in tier.name.lower():
        return False

    return True


SORT_FIELDS = {
    "name": lambda t: t.name.lower(),
    "total_payouts": total_payouts,
    "total_points": total_points,
    "created_date": lambda t: t.created_date,
    "updated_at": lambda t: t.updated_at,
}


def tier_statistics(tier, tournament_count=0):
    payouts = tier.payouts or []
    points = tier.points or []
    return {
        "total_payouts": sum(payouts),
        "total_points": sum(points),
        "average_payout": sum(payouts) / len(payouts) if payouts else 0,
        "average_points": sum(points) / len(points) if points else 0,
        "payout_levels": len(payouts),
        "point_levels": len(points),
        "top_payout": max(payouts) if payouts else 0,
        "top_points": max(points) if points else 0,
        "tournament_count": tournament_count,
    }


def enhance_tier(tier, include_season=False, include_tournaments=False, include_statistics=False):
    from seasons.serializers import SeasonSerializer
    from tournaments.models import Tournament
    from tournaments.serializers import TournamentSerializer

    extra = {"is_playoff": is_playoff_tier(tier)}
    if include_season:
        extra["season_detail"] = SeasonSerializer(tier.season).data
    tournaments = Tournament.objects.filter(tier=tier).order_by("start_date")
    if include_tournaments:
        extra["tournaments"] = TournamentSerializer(tournaments, many=True).data
    if include_statistics:
        extra["statistics"] = tier_statistics(tier, tournaments.count())
    return extra
