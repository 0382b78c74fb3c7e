import structlog

from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.permissions import IsAdmin, is_admin, member_for_user
from core.query import process_data
from core.views import AuditedWriteMixin, OptionsQueryMixin
from members.models import Member
from seasons.models import Season
from tournaments.models import Tournament
from tours.models import Tour
from tours.serializers import TourCardSerializer
from .models import Team
from .serializers import ScoreTeamsSerializer, SeedTeamsSerializer, TeamSerializer
from .utils import SORT_FIELDS, enhance_team, generate_team_analytics, matches_filters

logger = structlog.get_logger(__name__)


class TeamViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    serializer_class = TeamSerializer
    entity_name = "Team"
    audit_entity_type = "teams"
    filter_params = {
        "tournament": int,
        "tour_card": int,
        "season": int,
        "member": int,
        "min_earnings": int,
        "max_earnings": int,
        "min_points": int,
        "max_points": int,
        "make_cut": bool,
        "position": str,
        "has_golfer": int,
    }
    enhance_params = ("include_tournament", "include_tour_card", "include_member", "include_golfers",
                      "include_statistics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        return Team.objects.select_related("tournament", "tour_card", "tour_card__member")

    def get_query_records(self, options):
        queryset = self.get_queryset()
        criteria = options["filter"]
        if "tournament" in criteria:
            queryset = queryset.filter(tournament=criteria["tournament"])
        if "tour_card" in criteria:
            queryset = queryset.filter(tour_card=criteria["tour_card"])
        if "season" in criteria:
            queryset = queryset.filter(tournament__season=criteria["season"])
        return queryset

    def get_extra_fields(self, record, enhance):
        return enhance_team(record, **enhance)

    def check_can_edit(self, tour_card, tournament):
        if is_admin(self.request.user):
            return
        if member_for_user(self.request.user) != tour_card.member:
            raise PermissionDenied("Only the tour card owner or an admin can edit this team")
        if tournament.status != "upcoming":
            raise PermissionDenied("Picks are locked once the tournament has started")

    def perform_create(self, serializer):
        data = serializer.validated_data
        self.check_can_edit(data["tour_card"], data["tournament"])
        super().perform_create(serializer)

    def perform_update(self, serializer):
        team = serializer.instance
        self.check_can_edit(team.tour_card, team.tournament)
        data = serializer.validated_data
        if "tour_card" in data or "tournament" in data:
            self.check_can_edit(data.get("tour_card", team.tour_card), data.get("tournament", team.tournament))
        super().perform_update(serializer)

    @action(detail=False, methods=["get"], permission_classes=[permissions.AllowAny])
    def season_standings(self, request):
        season = get_object_or_404(Season, pk=request.query_params.get("season"))
        tour_cards = Team.objects.season_standings(season)
        return Response(TourCardSerializer(tour_cards, many=True).data)

    @action(detail=False, methods=["get"], permission_classes=[permissions.AllowAny])
    def championships(self, request):
        member = get_object_or_404(Member, pk=request.query_params.get("member"))
        season = request.query_params.get("season", None)
        teams = Team.objects.championships(member, season=season)
        return Response([{
            **TeamSerializer(team).data,
            "tournament_name": team.tournament.name,
            "tier_name": team.tournament.tier.name,
        } for team in teams])

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def seed_random(self, request):
        serializer = SeedTeamsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tournament = get_object_or_404(Tournament, pk=data["tournament"])
        tour = get_object_or_404(Tour, pk=data["tour"]) if data["tour"] else None
        result = Team.objects.seed_random(tournament, size=data["size"], dry_run=data["dry_run"], tour=tour,
                                          actor=request)
        return Response(result, status=status.HTTP_200_OK if data["dry_run"] else status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def score(self, request):
        serializer = ScoreTeamsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tournament = get_object_or_404(Tournament, pk=serializer.validated_data["tournament"])
        result = Team.objects.score_tournament(tournament, dry_run=serializer.validated_data["dry_run"],
                                               actor=request)
        return Response(result)

    @action(detail=False, methods=["get"])
    def analytics(self, request):
        options = self.get_query_options(request.query_params)
        teams = process_data(self.get_query_records(options), filter=self.get_record_filter(options))
        return Response(generate_team_analytics(teams))
