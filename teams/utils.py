from core.util import format_cents
from core.validators import collect_errors, number_range, positive_number

ROUND_FIELDS = ("round_one", "round_two", "round_three", "round_four")
MISSED_POSITIONS = ("CUT", "WD", "DQ")
CHAMPIONSHIP_TIERS = ("major", "playoff")
MISSED_CUT_POSITION = 999


def validate_team_data(data):
    errors = [
        positive_number(data.get("earnings"), "earnings"),
        positive_number(data.get("points"), "points"),
        number_range(data.get("round"), 1, 4, "round"),
    ]
    errors.extend(number_range(data.get(field), 0, 200, field) for field in ROUND_FIELDS)

    golfer_ids = data.get("golfer_ids")
    if golfer_ids is not None:
        if not isinstance(golfer_ids, list) or not golfer_ids:
            errors.append("golfer_ids must be a non-empty list")
        elif any(isinstance(gid, bool) or not isinstance(gid, int) or gid <= 0 for gid in golfer_ids):
            errors.append("golfer_ids must contain only positive integers")
        elif len(set(golfer_ids)) != len(golfer_ids):
            errors.append("golfer_ids must not contain duplicates")
    collect_errors(*errors)


def calculate_team_score(team):
    rounds = [getattr(team, field) for field in ROUND_FIELDS if getattr(team, field) is not None]
    return sum(rounds) if rounds else None


def final_position(position):
    if position is None:
        return MISSED_CUT_POSITION
    text = str(position).strip().upper()
    if not text or text in MISSED_POSITIONS:
        return MISSED_CUT_POSITION
    text = text.lstrip("T")
    return int(text) if text.isdigit() else MISSED_CUT_POSITION


def is_champion_position(position):
    return position is not None and str(position).strip().upper() in ("1", "T1")


def is_championship_tournament(tournament):
    tier_name = (tournament.tier.name if tournament.tier_id else "").lower()
    return any(name in tier_name for name in CHAMPIONSHIP_TIERS) or "canadian open" in tournament.name.lower()


def fnv1a_32(value):
    """32-bit FNV-1a hash of a string."""
    hash_value = 2166136261
    for char in value:
        hash_value ^= ord(char)
        hash_value = (hash_value * 16777619) & 0xFFFFFFFF
    return hash_value


def lcg(seed):
    state = seed & 0xFFFFFFFF

    def rand():
        nonlocal state
        state = (1664525 * state + 1013904223) & 0xFFFFFFFF
        return state / 4294967296

    return rand


def pick_unique(pool, count, seed):
    if count > len(pool):
        raise ValueError("Cannot pick more unique items than pool size")

    rand = lcg(seed)
    picked = set()
    result = []
    attempts = 0
    while len(result) < count:
        index = int(rand() * len(pool))
        if index not in picked:
            picked.add(index)
            result.append(pool[index])
        attempts += 1
        if attempts > len(pool) * 50:
            raise ValueError("Failed to pick unique random golfers")
    return result


def matches_filters(team, criteria):
    for field in ("tournament", "tour_card"):
        if field in criteria and getattr(team, f"{field}_id") != criteria[field]:
            return False
    if "season" in criteria and team.tournament.season_id != criteria["season"]:
        return False
    if "member" in criteria and team.tour_card.member_id != criteria["member"]:
        return False
    if "min_earnings" in criteria and team.earnings < criteria["min_earnings"]:
        return False
    if "max_earnings" in criteria and team.earnings > criteria["max_earnings"]:
        return False
    if "min_points" in criteria and team.points < criteria["min_points"]:
        return False
    if "max_points" in criteria and team.points > criteria["max_points"]:
        return False
    if "make_cut" in criteria and bool(team.make_cut) != criteria["make_cut"]:
        return False
    if "position" in criteria and team.position != criteria["position"]:
        return False
    if "has_golfer" in criteria and criteria["has_golfer"] not in (team.golfer_ids or []):
        return False
    return True


SORT_FIELDS = {
    "earnings": lambda t: t.earnings,
    "points": lambda t: t.points,
    "score": lambda t: t.score,
    "position": lambda t: final_position(t.position),
    "today": lambda t: t.today,
    "created_date": lambda t: t.created_date,
}


def team_golfers(team):
    from golfers.models import Golfer, TournamentGolfer

    golfers = Golfer.objects.filter(api_id__in=team.golfer_ids or [])
    entries = {entry.golfer_id: entry for entry in
               TournamentGolfer.objects.filter(tournament_id=team.tournament_id, golfer__in=golfers)}
    rows = []
    for golfer in golfers:
        entry = entries.get(golfer.id)
        rows.append({
            "id": golfer.id,
            "api_id": golfer.api_id,
            "player_name": golfer.player_name,
            "country": golfer.country,
            "group": entry.group if entry else None,
            "rating": entry.rating if entry else None,
            "world_rank": entry.world_rank if entry else golfer.world_rank,
            "position": entry.position if entry else None,
            "score": entry.score if entry else None,
        })
    return rows


def enhance_team(team, include_tournament=False, include_tour_card=False, include_member=False,
                 include_golfers=False, include_statistics=False):
    from members.serializers import SimpleMemberSerializer
    from tournaments.serializers import TournamentSerializer
    from tours.serializers import TourCardSerializer

    extra = {}
    if include_tournament:
        extra["tournament_detail"] = TournamentSerializer(team.tournament).data
    if include_tour_card:
        extra["tour_card_detail"] = TourCardSerializer(team.tour_card).data
    if include_member:
        extra["member_detail"] = SimpleMemberSerializer(team.tour_card.member).data
    if include_golfers:
        extra["golfers"] = team_golfers(team)
    if include_statistics:
        extra["statistics"] = {
            "total_score": calculate_team_score(team),
            "final_position": final_position(team.position),
            "earnings_formatted": format_cents(team.earnings),
            "golfer_count": len(team.golfer_ids or []),
        }
    return extra


def generate_team_analytics(teams):
    teams = list(teams)
    scored = [team for team in teams if team.score is not None]
    total_earnings = sum(team.earnings or 0 for team in teams)
    top = max(teams, key=lambda team: (team.points or 0, team.earnings or 0), default=None)
    return {
        "total_teams": len(teams),
        "average_score": round(sum(team.score for team in scored) / len(scored), 2) if scored else None,
        "made_cut_percentage": round(100 * sum(1 for team in teams if team.make_cut) / len(teams), 1)
        if teams else 0,
        "total_earnings": total_earnings,
        "top_performer": {
            "team_id": top.id,
            "tour_card_id": top.tour_card_id,
            "display_name": top.tour_card.display_name,
            "points": top.points,
            "earnings": top.earnings,
        } if top is not None else None,
    }
