import os

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging
from django_structlog.celery.steps import DjangoStructLogInitStep

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pgc.settings')

app = Celery('pgc')

# namespace='CELERY' means all celery-related configuration keys
# should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

app.steps['worker'].add(DjangoStructLogInitStep)

# The database scheduler picks these up on start; edit the timing in the admin.
app.conf.beat_schedule = {
    "tournament-statuses": {
        "task": "tournaments.tasks.update_tournament_statuses",
        "schedule": crontab(minute="*/15"),
    },
    "sync-golfers": {
        "task": "golfers.tasks.sync_golfers_task",
        "schedule": crontab(hour=4, minute=0),
    },
    "team-scores": {
        "task": "teams.tasks.score_live_tournaments",
        "schedule": crontab(minute="*/10"),
    },
    "tour-card-standings": {
        "task": "tours.tasks.recompute_tour_card_standings",
        "schedule": crontab(hour=5, minute=0),
    },
    "member-active-flags": {
        "task": "members.tasks.recompute_member_active_flags",
        "schedule": crontab(hour=5, minute=30, day_of_week="mon"),
    },
}


@setup_logging.connect
def config_loggers(*args, **kwargs):
    from logging.config import dictConfig  # noqa
    from django.conf import settings  # noqa

    dictConfig(settings.LOGGING)


app.autodiscover_tasks()
