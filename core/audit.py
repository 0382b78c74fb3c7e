import json
from datetime import date, datetime

import structlog
from django.db import transaction

from core.models import AuditLog
from core.permissions import member_for_user

logger = structlog.get_logger(__name__)

IGNORED_FIELDS = ("updated_at", "created_date")


def _json_safe(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    try:
        json.dumps(value)
        return value
    except TypeError:
        return str(value)


def compute_changes(before, after):
    """
    Compare two field dicts and return {field: {"old": ..., "new": ...}} for every field
    in `after` whose value differs. Timestamp bookkeeping fields are ignored.
    """
    changes = {}
    for field, new_value in after.items():
        if field in IGNORED_FIELDS:
            continue
        old_value = before.get(field)
        if old_value != new_value:
            changes[field] = {"old": _json_safe(old_value), "new": _json_safe(new_value)}
    return changes


def _resolve_actor(actor):
    request = None
    user = actor
    if hasattr(actor, "user") and hasattr(actor, "META"):
        request = actor
        user = actor.user
    return request, user


def log_audit(actor, entity_type, entity_id, action, changes=None, metadata=None):
    """
    Record an audit entry. `actor` may be a request or a user. Failures are logged
    and never raised to the caller.
    """
    try:
        request, user = _resolve_actor(actor)
        member = member_for_user(user)
        ip_address = None
        user_agent = None
        if request is not None:
            ip_address = request.META.get("REMOTE_ADDR")
            user_agent = (request.META.get("HTTP_USER_AGENT") or "")[:255] or None

        with transaction.atomic():
            return AuditLog.objects.create(
                member=member,
                entity_type=entity_type,
                entity_id=str(entity_id),
                action=action,
                changes=changes or None,
                metadata={key: _json_safe(value) for key, value in metadata.items()} if metadata else None,
                ip_address=ip_address,
                user_agent=user_agent,
            )
    except Exception as ex:
        logger.error("Audit log write failed", entity_type=entity_type, entity_id=str(entity_id),
                     action=action, error=str(ex))
        return None
