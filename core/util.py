from collections import defaultdict
from datetime import date

from django.contrib.contenttypes.models import ContentType
from django.urls import reverse
from django.utils.html import format_html


def linkify(field_name):
    def _linkify(obj):
        linked_obj = getattr(obj, field_name)
        if linked_obj is None:
            return "-"
        content_type = ContentType.objects.get_for_model(linked_obj)
        view_name = f"admin:{content_type.app_label}_{content_type.model}_change"
        link_url = reverse(view_name, args=[linked_obj.pk])
        return format_html('<a href="{}">{}</a>', link_url, linked_obj)

    _linkify.short_description = field_name.replace("_", " ").capitalize()
    return _linkify


def current_year():
    return date.today().year


def to_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Not a boolean: {value}")


def safe_int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def format_cents(cents):
    """
    Format integer cents as dollars, e.g. 123456 -> "$1,234.56" and -500 -> "-$5.00".
    """
    cents = int(cents or 0)
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{remainder:02d}"


def format_score(score):
    if score is None:
        return "-"
    if score == 0:
        return "E"
    if score > 0:
        return f"+{score}"
    return str(score)


def format_date_range(start, end):
    if start is None:
        return ""
    if end is None or start.date() == end.date():
        return start.strftime("%b %-d, %Y")
    if start.year != end.year:
        return f"{start.strftime('%b %-d, %Y')} - {end.strftime('%b %-d, %Y')}"
    if start.month != end.month:
        return f"{start.strftime('%b %-d')} - {end.strftime('%b %-d, %Y')}"
    return f"{start.strftime('%b %-d')}-{end.strftime('%-d, %Y')}"


def sum_values(values):
    return sum(v for v in values if v is not None)


def group_by(items, key):
    groups = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return dict(groups)
