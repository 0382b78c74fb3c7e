from celery import shared_task

from .models import Member


@shared_task(bind=True)
def recompute_member_active_flags(self):
    return Member.objects.recompute_active_flags()
