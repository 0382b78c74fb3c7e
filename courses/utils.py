import re

from core.validators import collect_errors, number_range, string_length

US_STATE_SUFFIX = re.compile(r",\s*[A-Z]{2}$")


def validate_course_data(data, partial=False):
    errors = []
    for field, label in (("api_id", "API id"), ("name", "Course name"), ("location", "Location")):
        if partial and field not in data:
            continue
        value = data.get(field)
        if value is None or not str(value).strip():
            errors.append(f"{label} is required")
    if not partial or "name" in data:
        errors.append(string_length(data.get("name"), 2, 200, "Course name"))
    if not partial or "location" in data:
        errors.append(string_length(data.get("location"), 2, 200, "Location"))
    errors.append(number_range(data.get("par"), 54, 90, "Par"))
    errors.append(number_range(data.get("front"), 27, 45, "Front nine par"))
    errors.append(number_range(data.get("back"), 27, 45, "Back nine par"))
    errors.append(number_range(data.get("time_zone_offset"), -12, 14, "Time zone offset"))

    par, front, back = data.get("par"), data.get("front"), data.get("back")
    if par is not None and front is not None and back is not None and front + back != par:
        errors.append("Front and back nine must add up to par")
    collect_errors(*errors)


def difficulty_category(par):
    if par >= 72:
        return "championship"
    if par >= 70:
        return "standard"
    if par >= 62:
        return "executive"
    return "par3"


def format_time_zone(offset):
    if not offset:
        return "UTC"
    sign = "+" if offset > 0 else "-"
    hours = abs(offset)
    text = str(int(hours)) if float(hours).is_integer() else str(hours)
    return f"UTC{sign}{text}"


def is_international(location):
    text = (location or "").strip()
    if US_STATE_SUFFIX.search(text):
        return False
    return "USA" not in text


def matches_filters(course, criteria):
    for field in ("api_id", "name", "location"):
        if field in criteria and getattr(course, field) != criteria[field]:
            return False
    if "par" in criteria and course.par != criteria["par"]:
        return False
    if "min_par" in criteria and course.par < criteria["min_par"]:
        return False
    if "max_par" in criteria and course.par > criteria["max_par"]:
        return False
    if "time_zone_offset" in criteria and course.time_zone_offset != criteria["time_zone_offset"]:
        return False

    search_term = (criteria.get("search_term") or "").lower()
    if search_term and search_term not in course.name.lower() and search_term not in course.location.lower():
        return False

    return True


SORT_FIELDS = {
    "name": lambda c: c.name.lower(),
    "location": lambda c: c.location.lower(),
    "par": lambda c: c.par,
    "time_zone_offset": lambda c: c.time_zone_offset,
    "created_date": lambda c: c.created_date,
    "updated_at": lambda c: c.updated_at,
}


def enhance_course(course, include_tournaments=False, include_statistics=False):
    from tournaments.models import Tournament
    from tournaments.serializers import TournamentSerializer

    extra = {}
    tournaments = Tournament.objects.filter(course=course).order_by("start_date")
    if include_tournaments:
        extra["tournaments"] = TournamentSerializer(tournaments, many=True).data
    if include_statistics:
        extra["statistics"] = {
            "tournament_count": tournaments.count(),
            "difficulty": difficulty_category(course.par),
            "time_zone": format_time_zone(course.time_zone_offset),
            "is_international": is_international(course.location),
        }
    return extra
