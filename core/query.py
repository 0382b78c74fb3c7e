from datetime import datetime, time
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.exceptions import ValidationFailedError
from core.util import to_bool

SORT_ORDERS = ("asc", "desc")
WHERE_OPS = ("eq", "neq", "in", "includes", "contains", "startsWith", "endsWith",
             "gt", "gte", "lt", "lte", "exists")


def process_data(items: Iterable, filter: Optional[Callable] = None, sort: Optional[Callable] = None,
                 limit: Optional[int] = None, skip: Optional[int] = None) -> List:
    """
    Run the standard in-memory pipeline over a result set: filter, sort, then skip and limit.

    Args:
        items: Records to process.
        filter: Predicate; records for which it returns False are dropped.
        sort: A callable that takes the filtered list and returns it ordered
            (see get_sort_function).
        limit: Maximum number of records to return. None or 0 returns everything.
        skip: Number of records to drop from the front after sorting.

    Returns:
        A new list of records.
    """
    result = list(items)
    if filter is not None:
        result = [item for item in result if filter(item)]
    if sort is not None:
        result = sort(result)
    if skip:
        result = result[skip:]
    if limit:
        result = result[:limit]
    return result


def get_sort_function(sort_by: Optional[str], sort_order: Optional[str], fields: Dict[str, Callable]):
    """
    Build a sort callable for the given field. Records whose sort value is None
    always go last. Unknown fields return None (leave the order untouched).
    """
    getter = fields.get(sort_by) if sort_by else None
    if getter is None:
        return None

    reverse = (sort_order or "desc").lower() != "asc"

    def sort(items):
        present = [item for item in items if getter(item) is not None]
        missing = [item for item in items if getter(item) is None]
        return sorted(present, key=getter, reverse=reverse) + missing

    return sort


def paginate(items: List, limit: Optional[int] = None, offset: Optional[int] = None) -> List:
    start = offset or 0
    if not limit:
        return items[start:]
    return items[start:start + limit]


def _comparable(value, case_insensitive):
    if isinstance(value, str) and case_insensitive:
        return value.lower()
    return value


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def matches_condition(value: Any, condition: Dict) -> bool:
    op = condition.get("op") or "eq"
    expected = condition.get("value")
    case_insensitive = condition.get("case_insensitive", False)

    if op == "exists":
        if expected is False:
            return value is None
        return value is not None

    if op == "in":
        return any(v == value for v in condition.get("values") or [])

    if op == "includes":
        if expected is None or not isinstance(value, (list, tuple, set)):
            return False
        return expected in value

    if op in ("contains", "startsWith", "endsWith"):
        if not isinstance(expected, str) or not isinstance(value, str):
            return False
        haystack = _comparable(value, case_insensitive)
        needle = _comparable(expected, case_insensitive)
        if op == "contains":
            return needle in haystack
        if op == "startsWith":
            return haystack.startswith(needle)
        return haystack.endswith(needle)

    if op in ("gt", "gte", "lt", "lte"):
        if not _is_number(expected) or not _is_number(value):
            return False
        if op == "gt":
            return value > expected
        if op == "gte":
            return value >= expected
        if op == "lt":
            return value < expected
        return value <= expected

    if op == "neq":
        return value != expected

    return value == expected


def matches_where(record, conditions: Optional[List[Dict]], field_getter: Callable) -> bool:
    if not conditions:
        return True
    return all(matches_condition(field_getter(record, c["field"]), c) for c in conditions)


def _compare(a, b, case_insensitive=False):
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    if isinstance(a, bool) and isinstance(b, bool):
        return int(a) - int(b)
    a_str = _comparable(str(a), case_insensitive)
    b_str = _comparable(str(b), case_insensitive)
    return (a_str > b_str) - (a_str < b_str)


def order_by_key(order_by: List[Dict], field_getter: Callable):
    """
    Build a sort key from a list of {field, direction, nulls, case_insensitive}
    clauses. Null placement is independent of the direction.
    """
    clauses = [c for c in order_by if c.get("field")]

    def comparator(a, b):
        for clause in clauses:
            direction = clause.get("direction") or "asc"
            nulls = clause.get("nulls") or "last"
            a_val = field_getter(a, clause["field"])
            b_val = field_getter(b, clause["field"])

            if a_val is None or b_val is None:
                if a_val is None and b_val is None:
                    continue
                null_cmp = 1 if a_val is None else -1
                return -null_cmp if nulls == "first" else null_cmp

            cmp = _compare(a_val, b_val, clause.get("case_insensitive", False))
            if cmp != 0:
                return -cmp if direction == "desc" else cmp
        return 0

    return cmp_to_key(comparator)


def _to_datetime(value):
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = parse_datetime(str(value))
        if parsed is None:
            day = parse_date(str(value))
            if day is None:
                return None
            parsed = datetime.combine(day, time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _to_int_list(value):
    if isinstance(value, (list, tuple)):
        return [int(v) for v in value]
    return [int(v) for v in str(value).split(",") if v.strip()]


CONVERTERS = {
    int: int,
    float: float,
    str: lambda v: str(v).strip(),
    bool: to_bool,
    "datetime": _to_datetime,
    "int_list": _to_int_list,
}


def _convert(name, value, kind):
    if isinstance(value, bool) and kind is bool:
        return value
    try:
        converted = CONVERTERS[kind](value)
    except (TypeError, ValueError):
        raise ValidationFailedError(f"{name} has an invalid value")
    if converted is None:
        raise ValidationFailedError(f"{name} has an invalid value")
    return converted


def _flatten(params):
    flat = {}
    for key, value in params.items():
        if key in ("filter", "sort", "pagination", "enhance") and isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value
    return flat


def parse_query_options(params, filters: Dict[str, Any] = None, enhance: Iterable[str] = (),
                        sort_fields: Iterable[str] = ()) -> Dict:
    """
    Turn request query params (or a JSON options body) into an options dict of the form
    {id, ids, filter, sort, pagination, enhance, where, order_by}.

    Nested "filter", "sort", "pagination" and "enhance" objects are accepted as well as flat keys.
    """
    filters = filters or {}
    if hasattr(params, "dict"):
        params = params.dict()
    params = _flatten(params)

    options = {"filter": {}, "sort": {}, "pagination": {}, "enhance": {}}

    if params.get("id") not in (None, ""):
        options["id"] = _convert("id", params["id"], int)
    if params.get("ids") not in (None, ""):
        options["ids"] = _convert("ids", params["ids"], "int_list")

    for name, kind in filters.items():
        value = params.get(name)
        if value is None or value == "":
            continue
        options["filter"][name] = _convert(name, value, kind)

    sort_by = params.get("sort_by")
    if sort_by:
        if sort_fields and sort_by not in sort_fields:
            raise ValidationFailedError(f"sort_by must be one of {', '.join(sort_fields)}")
        options["sort"]["sort_by"] = sort_by
    sort_order = params.get("sort_order")
    if sort_order:
        if sort_order not in SORT_ORDERS:
            raise ValidationFailedError("sort_order must be asc or desc")
        options["sort"]["sort_order"] = sort_order

    for name in ("limit", "offset"):
        value = params.get(name)
        if value is None or value == "":
            continue
        number = _convert(name, value, int)
        if number < 0:
            raise ValidationFailedError(f"{name} must not be negative")
        options["pagination"][name] = number

    for flag in enhance:
        if flag in params:
            options["enhance"][flag] = _convert(flag, params[flag], bool)

    where = params.get("where")
    if where:
        if not isinstance(where, list) or any(not isinstance(c, dict) or not c.get("field") for c in where):
            raise ValidationFailedError("where must be a list of conditions with a field")
        for condition in where:
            if (condition.get("op") or "eq") not in WHERE_OPS:
                raise ValidationFailedError(f"Unsupported where op: {condition.get('op')}")
        options["where"] = where

    order_by = params.get("order_by")
    if order_by:
        if not isinstance(order_by, list) or any(not isinstance(c, dict) for c in order_by):
            raise ValidationFailedError("order_by must be a list of clauses")
        options["order_by"] = order_by

    return options
