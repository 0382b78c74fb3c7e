import re
from urllib.parse import urlparse

from core.exceptions import ValidationFailedError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def string_length(value, min_length, max_length, field):
    if value is None:
        return None
    length = len(str(value).strip())
    if length < min_length or length > max_length:
        return f"{field} must be between {min_length} and {max_length} characters"
    return None


def number_range(value, minimum, maximum, field):
    if value is None:
        return None
    if minimum is not None and value < minimum:
        return f"{field} must be at least {minimum}" if maximum is None \
            else f"{field} must be between {minimum} and {maximum}"
    if maximum is not None and value > maximum:
        return f"{field} must be at most {maximum}" if minimum is None \
            else f"{field} must be between {minimum} and {maximum}"
    return None


def positive_number(value, field):
    if value is None:
        return None
    if value < 0:
        return f"{field} must be non-negative"
    return None


def valid_url(value, field):
    if not value:
        return None
    parsed = urlparse(str(value))
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return f"{field} must be a valid http(s) URL"
    return None


def valid_email(value):
    if value is None:
        return None
    if not EMAIL_PATTERN.match(str(value)):
        return "Invalid email format"
    return None


def integer_list(values, field, allow_empty=False, positive=False):
    if values is None:
        return None
    if not isinstance(values, (list, tuple)):
        return f"{field} must be a list"
    if not values and not allow_empty:
        return f"{field} must not be empty"
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            return f"{field} must contain only integers"
        if positive and value <= 0:
            return f"{field} must contain only positive integers"
        if value < 0:
            return f"{field} must contain only non-negative integers"
    return None


def collect_errors(*messages):
    errors = [message for message in messages if message]
    if errors:
        raise ValidationFailedError(errors)
