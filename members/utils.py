import re
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from core.util import format_cents

NAME_SPLIT = re.compile(r"\s+")
NAME_BREAKS = ("-", "'", "’")


def normalize_email(email):
    return (email or "").strip().lower()


def generate_full_name(first_name, last_name):
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    return " ".join(part for part in (first, last) if part)


def normalize_name_token(value):
    """
    Capitalize a single name token, including the letter after a hyphen or
    apostrophe: "o'brien-SMITH" -> "O'Brien-Smith".
    """
    token = (value or "").strip()
    out = []
    capitalize = True
    for ch in token:
        if ch.isalpha():
            out.append(ch.upper() if capitalize else ch.lower())
            capitalize = False
            continue
        out.append(ch)
        capitalize = ch in NAME_BREAKS
    return "".join(out)


def normalize_person_name(value):
    raw = (value or "").strip()
    if not raw:
        return ""
    return " ".join(normalize_name_token(token) for token in NAME_SPLIT.split(raw) if token)


def generate_display_name(display_name, first_name, last_name, email):
    if display_name and display_name.strip():
        return display_name.strip()
    full_name = generate_full_name(first_name, last_name)
    if full_name:
        return full_name
    if email:
        return email.split("@")[0]
    return "Anonymous User"


def is_online(last_login_at, now=None):
    if last_login_at is None:
        return False
    now = now or timezone.now()
    return last_login_at > now - timedelta(minutes=settings.MEMBER_ONLINE_MINUTES)


def days_since_last_login(last_login_at, now=None):
    if last_login_at is None:
        return None
    now = now or timezone.now()
    return (now - last_login_at).days


def friend_ids(member):
    # uses the prefetch cache when the view prefetched friends
    return [friend.id for friend in member.friends.all()]


def member_field_value(member, field):
    """Resolve a field name, including derived fields, for where/order_by clauses."""
    if field == "full_name":
        return generate_full_name(member.first_name, member.last_name)
    if field == "formatted_balance":
        return format_cents(member.account)
    if field == "effective_display_name":
        return member.effective_display_name()
    if field == "has_balance":
        return member.account > 0
    if field == "is_online":
        return is_online(member.last_login_at)
    if field == "days_since_last_login":
        return days_since_last_login(member.last_login_at)
    if field == "friend_count":
        return len(friend_ids(member))
    if field == "friends":
        return friend_ids(member)
    if field == "user":
        return member.user_id
    value = getattr(member, field, None)
    if value == "":
        return None
    return value


def matches_filters(member, criteria):
    role = criteria.get("role")
    if role and member.role != role:
        return False

    if "is_active" in criteria and bool(member.is_active) != criteria["is_active"]:
        return False

    min_balance = criteria.get("min_balance")
    if min_balance is not None and member.account < min_balance:
        return False
    max_balance = criteria.get("max_balance")
    if max_balance is not None and member.account > max_balance:
        return False

    if "has_balance" in criteria and (member.account > 0) != criteria["has_balance"]:
        return False

    if "has_friends" in criteria and (len(friend_ids(member)) > 0) != criteria["has_friends"]:
        return False

    if "is_online" in criteria and is_online(member.last_login_at) != criteria["is_online"]:
        return False

    search_term = criteria.get("search_term")
    if search_term:
        username = member.user.username if member.user_id else ""
        searchable = " ".join([member.email, member.first_name or "", member.last_name or "",
                               member.display_name or "", username, member.role]).lower()
        if search_term.lower() not in searchable:
            return False

    for name, attribute in (("created", "created_date"), ("updated", "updated_at"),
                            ("last_login", "last_login_at")):
        value = getattr(member, attribute)
        after = criteria.get(f"{name}_after")
        before = criteria.get(f"{name}_before")
        if after is not None and (value is None or value < after):
            return False
        if before is not None and (value is None or value > before):
            return False

    return True


def apply_filters(members, criteria):
    return [member for member in members if matches_filters(member, criteria)]


SORT_FIELDS = {
    "first_name": lambda m: (m.first_name or "").lower(),
    "last_name": lambda m: (m.last_name or "").lower(),
    "full_name": lambda m: m.full_name().lower(),
    "email": lambda m: m.email,
    "role": lambda m: m.role,
    "account": lambda m: m.account,
    "created_date": lambda m: m.created_date,
    "updated_at": lambda m: m.updated_at,
    "last_login_at": lambda m: m.last_login_at,
}


def generate_member_analytics(members, now=None):
    now = now or timezone.now()
    week_ago = now - timedelta(days=7)
    total = len(members)
    total_balance = sum(m.account for m in members)
    by_role = {}
    for member in members:
        by_role[member.role] = by_role.get(member.role, 0) + 1

    return {
        "total": total,
        "active": len([m for m in members if m.is_active]),
        "inactive": len([m for m in members if not m.is_active]),
        "online": len([m for m in members if is_online(m.last_login_at, now)]),
        "recently_active": len([m for m in members if m.last_login_at and m.last_login_at > week_ago]),
        "by_role": by_role,
        "total_balance": total_balance,
        "average_balance": total_balance / total if total else 0,
        "with_positive_balance": len([m for m in members if m.account > 0]),
        "with_negative_balance": len([m for m in members if m.account < 0]),
        "average_friends": sum(len(friend_ids(m)) for m in members) / total if total else 0,
    }


def enhance_member(member, include_friends=False, include_tour_cards=False, include_teams=False):
    from members.serializers import SimpleMemberSerializer
    from teams.models import Team
    from teams.serializers import TeamSerializer
    from tours.models import TourCard
    from tours.serializers import TourCardSerializer

    extra = {
        "full_name": member.full_name(),
        "effective_display_name": member.effective_display_name(),
        "formatted_balance": format_cents(member.account),
        "has_balance": member.account > 0,
        "is_online": is_online(member.last_login_at),
        "days_since_last_login": days_since_last_login(member.last_login_at),
        "friend_count": len(friend_ids(member)),
    }

    if include_friends:
        extra["friend_members"] = SimpleMemberSerializer(member.friends.all(), many=True).data

    if include_tour_cards or include_teams:
        tour_cards = TourCard.objects.filter(member=member).select_related("tour", "season")
        if include_tour_cards:
            extra["tour_cards"] = TourCardSerializer(tour_cards, many=True).data
        if include_teams:
            teams = Team.objects.filter(tour_card__in=tour_cards).order_by("-tournament__start_date")
            extra["teams"] = TeamSerializer(teams, many=True).data

    return extra
