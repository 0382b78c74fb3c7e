from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import NotFoundError
from core.permissions import IsAdminOrReadOnly
from core.views import AuditedWriteMixin, OptionsQueryMixin
from teams.models import Team
from teams.serializers import TeamSerializer
from tiers.models import Tier
from tiers.serializers import TierSerializer
from tournaments.models import Tournament
from tournaments.serializers import TournamentSerializer
from tours.models import Tour, TourCard
from tours.serializers import TourSerializer, TourCardSerializer
from .models import Season
from .serializers import SeasonSerializer
from .utils import SORT_FIELDS, enhance_season, matches_filters


class SeasonViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    serializer_class = SeasonSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Season"
    audit_entity_type = "seasons"
    filter_params = {
        "year": int,
        "number": int,
        "min_year": int,
        "max_year": int,
        "status": str,
    }
    enhance_params = ("include_tours", "include_tiers", "include_tournaments", "include_statistics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_queryset(self):
        return Season.objects.all()

    def get_extra_fields(self, record, enhance):
        return enhance_season(record, **enhance)

    @action(detail=False, methods=["get"])
    def current(self, request):
        season = Season.objects.current_season()
        if season is None:
            raise NotFoundError("Season")
        return Response(SeasonSerializer(season).data)

    @action(detail=True, methods=["get"])
    def standings(self, request, pk):
        season = self.get_object()
        tournaments = Tournament.objects.filter(season=season).order_by("start_date")
        tour_cards = TourCard.objects \
            .filter(season=season) \
            .select_related("member") \
            .order_by("-points", "-earnings", "display_name")
        teams = Team.objects.filter(tournament__season=season).order_by("tournament__start_date", "id")

        return Response({
            "season": SeasonSerializer(season).data,
            "tours": TourSerializer(Tour.objects.filter(season=season), many=True).data,
            "tiers": TierSerializer(Tier.objects.filter(season=season), many=True).data,
            "tournaments": TournamentSerializer(tournaments, many=True).data,
            "tour_cards": TourCardSerializer(tour_cards, many=True).data,
            "teams": TeamSerializer(teams, many=True).data,
        })
