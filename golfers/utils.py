import re

SUFFIXES = {"jr": "Jr.", "sr": "Sr."}
ROMAN_NUMERALS = ("I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X")


def normalize_suffix(token):
    raw = token.strip()
    stripped = raw.replace(".", "").strip()
    if stripped.lower() in SUFFIXES:
        return SUFFIXES[stripped.lower()]
    if stripped.upper() in ROMAN_NUMERALS:
        return stripped.upper()
    return raw


def normalize_player_name(name):
    """
    Data feeds list players as "Last, First". Convert to "First Last", keeping any
    suffix after the last name: "Love, III, Davis" -> "Davis Love III".
    """
    if not name:
        return name
    trimmed = name.strip()
    if "," not in trimmed:
        return trimmed
    parts = [part.strip() for part in trimmed.split(",") if part.strip()]
    if len(parts) < 2:
        return trimmed
    suffixes = [suffix for suffix in (normalize_suffix(part) for part in parts[1:-1]) if suffix]
    return re.sub(r"\s+", " ", " ".join([parts[-1], parts[0]] + suffixes)).strip()


def normalize_country(country):
    if country is None:
        return None
    text = str(country).strip()
    if not text or text.lower() == "unknown":
        return None
    return text


def rank_display(world_rank):
    if world_rank is None or world_rank <= 0:
        return "Unranked"
    return f"#{world_rank}"


def ranking_category(world_rank):
    if world_rank is None or world_rank <= 0:
        return "unranked"
    if world_rank <= 10:
        return "top10"
    if world_rank <= 50:
        return "top50"
    if world_rank <= 100:
        return "top100"
    return "ranked"


def numeric_position(position):
    if position is None:
        return None
    text = str(position).strip().upper().lstrip("T")
    return int(text) if text.isdigit() else None


def recent_form(positions):
    finishes = [finish for finish in (numeric_position(position) for position in positions) if finish is not None]
    if not finishes:
        return "unknown"
    average = sum(finishes) / len(finishes)
    if average <= 10:
        return "excellent"
    if average <= 25:
        return "good"
    if average <= 50:
        return "average"
    return "poor"


# (share of the field, cap) for groups one to four; the rest fill groups four and five
GROUP_LIMITS = ((0.1, 10), (0.175, 16), (0.225, 22), (0.25, 30))
GROUP_COUNT = 5


def group_index(index, total, groups):
    """
    Group slot (0-4) for the golfer at `index` in a field sorted best first, given the
    group sizes so far.
    """
    for slot, (share, cap) in enumerate(GROUP_LIMITS):
        if groups[slot] < total * share and groups[slot] < cap:
            return slot
    remaining = total - index
    if remaining <= groups[3] + groups[4] * 0.5 or remaining == 1:
        return 4
    return 3 if index % 2 else 4


def chunked(items, size):
    items = list(items)
    for start in range(0, len(items), size):
        yield items[start:start + size]


def matches_filters(golfer, criteria):
    if "api_id" in criteria and golfer.api_id != criteria["api_id"]:
        return False
    if "player_name" in criteria and golfer.player_name != criteria["player_name"]:
        return False
    if "country" in criteria and golfer.country != criteria["country"]:
        return False
    if "min_rank" in criteria and (golfer.world_rank is None or golfer.world_rank < criteria["min_rank"]):
        return False
    if "max_rank" in criteria and (golfer.world_rank is None or golfer.world_rank > criteria["max_rank"]):
        return False
    if "ranked" in criteria and (golfer.world_rank is not None) != criteria["ranked"]:
        return False

    search_term = (criteria.get("search_term") or "").lower()
    if search_term and search_term not in golfer.player_name.lower() \
            and search_term not in (golfer.country or "").lower():
        return False

    return True


SORT_FIELDS = {
    "player_name": lambda g: g.player_name.lower(),
    "world_rank": lambda g: g.world_rank,
    "country": lambda g: g.country,
    "api_id": lambda g: g.api_id,
}


def golfer_statistics(golfer):
    entries = list(golfer.tournaments.select_related("tournament").order_by("-tournament__start_date"))
    finishes = [finish for finish in (numeric_position(entry.position) for entry in entries) if finish is not None]
    return {
        "appearances": len(entries),
        "wins": sum(1 for entry in entries if numeric_position(entry.position) == 1),
        "cuts_made": sum(1 for entry in entries if entry.make_cut),
        "average_finish": round(sum(finishes) / len(finishes), 2) if finishes else None,
        "recent_form": recent_form([entry.position for entry in entries[:5]]),
        "rank_display": rank_display(golfer.world_rank),
        "ranking_category": ranking_category(golfer.world_rank),
    }


def enhance_golfer(golfer, include_tournaments=False, include_statistics=False):
    from golfers.serializers import TournamentGolferSerializer

    extra = {}
    if include_tournaments:
        entries = golfer.tournaments.order_by("-tournament__start_date")
        extra["tournaments"] = TournamentGolferSerializer(entries, many=True).data
    if include_statistics:
        extra["statistics"] = golfer_statistics(golfer)
    return extra
