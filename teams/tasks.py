import structlog
from celery import shared_task
from django.db.models import Q

from tournaments.models import Tournament
from .models import Team

logger = structlog.get_logger(__name__)


@shared_task(bind=True)
def score_live_tournaments(self):
    scored = {}
    for tournament in Tournament.objects.filter(Q(status="active") | Q(live_play=True)).exclude(status="cancelled"):
        result = Team.objects.score_tournament(tournament)
        scored[tournament.id] = result["updated"]

    if not scored:
        logger.info("No active tournament to score")
    return {
        "tournaments": len(scored),
        "teams": scored,
    }
