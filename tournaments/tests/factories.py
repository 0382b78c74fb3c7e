from datetime import timedelta

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from courses.tests.factories import CourseFactory
from tiers.tests.factories import TierFactory
from tournaments.models import Tournament


class TournamentFactory(DjangoModelFactory):
    class Meta:
        model = Tournament

    name = factory.Sequence(lambda n: f"Open Championship {n}")
    tier = factory.SubFactory(TierFactory)
    season = factory.SelfAttribute("tier.season")
    course = factory.SubFactory(CourseFactory)
    start_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=7))
    end_date = factory.LazyAttribute(lambda t: t.start_date + timedelta(days=4))
    status = "upcoming"
    current_round = 1
