from core.validators import collect_errors, number_range, positive_number, string_length, valid_url

STAT_FIELDS = ("earnings", "points", "wins", "top_ten", "top_five", "made_cut", "appearances", "playoff")


def validate_tour_data(data):
    errors = [
        string_length(data.get("name"), 3, 100, "Tour name"),
        string_length(data.get("short_form"), 2, 10, "Short form"),
        positive_number(data.get("buy_in"), "buy_in"),
        number_range(data.get("max_participants"), 1, None, "max_participants"),
        valid_url(data.get("logo_url"), "logo_url"),
    ]
    playoff_spots = data.get("playoff_spots")
    if playoff_spots is not None:
        if not isinstance(playoff_spots, list) or not playoff_spots:
            errors.append("playoff_spots must be a non-empty list")
        elif any(isinstance(spot, bool) or not isinstance(spot, int) or spot < 1 for spot in playoff_spots):
            errors.append("playoff_spots must contain only integers of at least 1")
    collect_errors(*errors)


def validate_tour_card_stats(data):
    collect_errors(
        string_length(data.get("display_name"), 1, 100, "Display name"),
        *[positive_number(data.get(field), field) for field in STAT_FIELDS],
    )


def tour_capacity(tour, default):
    return tour.max_participants if tour.max_participants is not None else default


def numeric_position(position):
    if position is None:
        return None
    text = str(position).strip().upper().lstrip("T")
    return int(text) if text.isdigit() else None


def assign_positions(cards):
    """
    Rank tour cards by points, highest first. Tied cards share a position with a T prefix.
    Returns {card id: position}.
    """
    ordered = sorted(cards, key=lambda card: -card.points)
    counts = {}
    for card in ordered:
        counts[card.points] = counts.get(card.points, 0) + 1

    positions = {}
    rank = 0
    previous = None
    for index, card in enumerate(ordered, start=1):
        if card.points != previous:
            rank = index
            previous = card.points
        positions[card.id] = f"T{rank}" if counts[card.points] > 1 else str(rank)
    return positions


def tour_matches_filters(tour, criteria):
    if "season" in criteria and tour.season_id != criteria["season"]:
        return False
    if "name" in criteria and tour.name != criteria["name"]:
        return False
    if "short_form" in criteria and tour.short_form != criteria["short_form"]:
        return False
    if "min_buy_in" in criteria and tour.buy_in < criteria["min_buy_in"]:
        return False
    if "max_buy_in" in criteria and tour.buy_in > criteria["max_buy_in"]:
        return False

    search_term = (criteria.get("search_term") or "").lower()
    if search_term and search_term not in tour.name.lower() and search_term not in tour.short_form.lower():
        return False

    return True


TOUR_SORT_FIELDS = {
    "name": lambda t: t.name.lower(),
    "buy_in": lambda t: t.buy_in,
    "max_participants": lambda t: t.max_participants,
    "created_date": lambda t: t.created_date,
}


def tour_card_matches_filters(card, criteria):
    for field in ("season", "tour", "member"):
        if field in criteria and getattr(card, f"{field}_id") != criteria[field]:
            return False
    if "min_points" in criteria and card.points < criteria["min_points"]:
        return False
    if "min_earnings" in criteria and card.earnings < criteria["min_earnings"]:
        return False
    if "playoff" in criteria and card.playoff != criteria["playoff"]:
        return False

    search_term = (criteria.get("search_term") or "").lower()
    if search_term and search_term not in card.display_name.lower():
        return False

    return True


TOUR_CARD_SORT_FIELDS = {
    "points": lambda c: c.points,
    "earnings": lambda c: c.earnings,
    "wins": lambda c: c.wins,
    "display_name": lambda c: c.display_name.lower(),
    "current_position": lambda c: numeric_position(c.current_position),
}


def tour_statistics(tour, default_capacity):
    cards = list(tour.tour_cards.all())
    earnings = [card.earnings for card in cards]
    return {
        "participant_count": len(cards),
        "total_buy_in": tour.buy_in * len(cards),
        "available_spots": max(tour_capacity(tour, default_capacity) - len(cards), 0),
        "total_earnings": sum(earnings),
        "average_earnings": round(sum(earnings) / len(earnings), 2) if earnings else 0,
    }


def enhance_tour(tour, include_season=False, include_tour_cards=False, include_statistics=False):
    from django.conf import settings
    from seasons.serializers import SeasonSerializer
    from tours.serializers import TourCardSerializer

    extra = {}
    if include_season:
        extra["season_detail"] = SeasonSerializer(tour.season).data
    if include_tour_cards:
        extra["tour_cards"] = TourCardSerializer(tour.tour_cards.order_by("-points", "display_name"), many=True).data
    if include_statistics:
        extra["statistics"] = tour_statistics(tour, settings.DEFAULT_MAX_PARTICIPANTS)
    return extra


def enhance_tour_card(card, include_member=False, include_tour=False, include_season=False, include_teams=False):
    from members.serializers import SimpleMemberSerializer
    from seasons.serializers import SeasonSerializer
    from teams.serializers import TeamSerializer
    from tours.serializers import TourSerializer

    extra = {}
    if include_member:
        extra["member_detail"] = SimpleMemberSerializer(card.member).data
    if include_tour:
        extra["tour_detail"] = TourSerializer(card.tour).data
    if include_season:
        extra["season_detail"] = SeasonSerializer(card.season).data
    if include_teams:
        extra["teams"] = TeamSerializer(card.teams.order_by("tournament__start_date"), many=True).data
    return extra
