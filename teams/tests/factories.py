import factory
from factory.django import DjangoModelFactory

from teams.models import Team
from tournaments.tests.factories import TournamentFactory
from tours.tests.factories import TourCardFactory


class TeamFactory(DjangoModelFactory):
    class Meta:
        model = Team

    tournament = factory.SubFactory(TournamentFactory)
    tour_card = factory.SubFactory(TourCardFactory, season=factory.SelfAttribute("..tournament.season"),
                                   tour__season=factory.SelfAttribute("...tournament.season"))
    golfer_ids = [1001, 1002, 1003, 1004, 1005, 1006]
