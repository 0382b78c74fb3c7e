import structlog
from celery import shared_task

from .datagolf import DataGolfAPIError
from .services import sync_golfers_from_datagolf

logger = structlog.get_logger(__name__)


@shared_task(bind=True)
def sync_golfers_task(self, dry_run=False):
    try:
        return sync_golfers_from_datagolf(dry_run=dry_run)
    except DataGolfAPIError as e:
        logger.error("Scheduled golfer sync failed", error=str(e))
        return {
            "error": str(e),
        }
