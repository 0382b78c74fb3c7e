import factory
from factory.django import DjangoModelFactory

from members.tests.factories import MemberFactory
from seasons.tests.factories import SeasonFactory
from tours.models import Tour, TourCard


class TourFactory(DjangoModelFactory):
    class Meta:
        model = Tour

    name = factory.Sequence(lambda n: f"Tour {n}")
    short_form = factory.Sequence(lambda n: f"T{n}")
    season = factory.SubFactory(SeasonFactory)
    buy_in = 10000
    playoff_spots = [35, 15]


class TourCardFactory(DjangoModelFactory):
    class Meta:
        model = TourCard

    display_name = factory.Sequence(lambda n: f"Card {n}")
    tour = factory.SubFactory(TourFactory)
    season = factory.SelfAttribute("tour.season")
    member = factory.SubFactory(MemberFactory)
