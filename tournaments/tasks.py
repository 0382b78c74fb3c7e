import structlog
from celery import shared_task
from django.utils import timezone

from .models import Tournament
from .utils import get_calculated_status

logger = structlog.get_logger(__name__)


@shared_task(bind=True)
def update_tournament_statuses(self):
    now = timezone.now()
    changes = {}

    for tournament in Tournament.objects.exclude(status="cancelled"):
        status = get_calculated_status(tournament.start_date, tournament.end_date, tournament.status, now)
        if status == tournament.status:
            continue
        key = f"{tournament.status}->{status}"
        changes[key] = changes.get(key, 0) + 1
        tournament.status = status
        tournament.save(update_fields=["status", "updated_at"])

    logger.info("Tournament statuses updated", changes=changes)
    return {
        "updated": sum(changes.values()),
        "changes": changes,
    }
