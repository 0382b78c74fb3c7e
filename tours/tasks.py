import structlog
from celery import shared_task

from seasons.models import Season
from .models import TourCard

logger = structlog.get_logger(__name__)


@shared_task(bind=True)
def recompute_tour_card_standings(self, season_id=None):
    season = Season.objects.filter(pk=season_id).first() if season_id else Season.objects.current_season()
    if season is None:
        logger.warning("No season to recompute", season_id=season_id)
        return {
            "updated": 0,
            "tour_cards": 0,
        }
    return TourCard.objects.recompute_for_season(season)
