import structlog

from django.conf import settings
from django.db import transaction
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.audit import compute_changes, log_audit
from core.exceptions import TooManyRecordsError
from core.permissions import IsAdmin, IsAdminOrReadOnly, member_for_user
from core.util import to_bool
from core.views import OptionsQueryMixin
from golfers.models import TournamentGolfer
from golfers.services import create_groups
from members.serializers import SimpleMemberSerializer
from teams.models import Team
from teams.serializers import TeamSerializer
from tours.models import Tour, TourCard
from tours.serializers import TourCardSerializer, TourSerializer
from .models import Tournament
from .serializers import TournamentSerializer
from .utils import SORT_FIELDS, enhance_tournament, get_calculated_status, matches_filters, \
    points_before_tournament

logger = structlog.get_logger(__name__)


class TournamentViewSet(OptionsQueryMixin, viewsets.ModelViewSet):
    serializer_class = TournamentSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Tournament"
    filter_params = {
        "season": int,
        "tier": int,
        "course": int,
        "status": str,
        "live_play": bool,
        "current_round": int,
        "start_after": "datetime",
        "start_before": "datetime",
        "search_term": str,
        "has_teams": bool,
    }
    enhance_params = ("include_season", "include_tier", "include_course", "include_teams", "include_golfers",
                      "include_statistics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_queryset(self):
        return Tournament.objects.select_related("season", "tier", "course")

    def get_query_records(self, options):
        queryset = self.get_queryset()
        criteria = options["filter"]
        if "season" in criteria:
            queryset = queryset.filter(season=criteria["season"])
        if "status" in criteria:
            queryset = queryset.filter(status=criteria["status"])
        return queryset

    def get_extra_fields(self, record, enhance):
        return enhance_tournament(record, **enhance)

    def perform_create(self, serializer):
        tournament = serializer.save()
        log_audit(self.request, "tournaments", tournament.id, "created")
        logger.info("Tournament created", tournament_id=tournament.id, status=tournament.status)

    def perform_update(self, serializer):
        tournament = serializer.instance
        data = serializer.validated_data
        before = {field: getattr(tournament, field) for field in data}
        extra = {}

        dates_changed = ("start_date" in data and data["start_date"] != tournament.start_date) or \
                        ("end_date" in data and data["end_date"] != tournament.end_date)
        if to_bool(self.request.data.get("auto_update_status", False)) and dates_changed:
            extra["status"] = get_calculated_status(data.get("start_date", tournament.start_date),
                                                    data.get("end_date", tournament.end_date),
                                                    data.get("status", tournament.status))
            before.setdefault("status", tournament.status)

        tournament = serializer.save(**extra)
        changes = compute_changes(before, {**data, **extra})
        if changes:
            log_audit(self.request, "tournaments", tournament.id, "updated", changes=changes)

    @transaction.atomic()
    def destroy(self, request, *args, **kwargs):
        tournament = self.get_object()
        options = request.data if request.data else request.query_params
        soft = to_bool(options.get("soft", False))
        cleanup_teams = to_bool(options.get("cleanup_teams", False))

        if soft:
            changes = compute_changes({"status": tournament.status}, {"status": "cancelled"})
            tournament.status = "cancelled"
            tournament.save(update_fields=["status", "updated_at"])
            log_audit(request, "tournaments", tournament.id, "updated", changes=changes, metadata={"soft": True})
            return Response({"deleted": False, "cancelled": True}, status=status.HTTP_200_OK)

        golfers = TournamentGolfer.objects.filter(tournament=tournament)
        teams = Team.objects.filter(tournament=tournament)
        dependents = golfers.count() + (teams.count() if cleanup_teams else 0)
        if dependents > settings.TOURNAMENT_DELETE_LIMIT:
            raise TooManyRecordsError(dependents, settings.TOURNAMENT_DELETE_LIMIT)

        deleted_golfers = golfers.delete()[0]
        deleted_teams = teams.delete()[0] if cleanup_teams else 0

        tournament_id = tournament.id
        tournament.delete()
        metadata = {"deleted_golfers": deleted_golfers, "deleted_teams": deleted_teams}
        log_audit(request, "tournaments", tournament_id, "deleted", metadata=metadata)
        logger.info("Tournament deleted", tournament_id=tournament_id, **metadata)

        return Response({"deleted": True, **metadata}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["put"], permission_classes=[IsAdmin])
    def mark_completed(self, request, pk):
        tournament = self.get_object()
        before = {"status": tournament.status, "current_round": tournament.current_round,
                  "live_play": tournament.live_play}
        tournament.status = "completed"
        tournament.current_round = 5
        tournament.live_play = False
        tournament.save()

        changes = compute_changes(before, {"status": "completed", "current_round": 5, "live_play": False})
        if changes:
            log_audit(request, "tournaments", tournament.id, "updated", changes=changes)
        return Response(self.get_serializer(tournament).data)

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def leaderboard(self, request, pk):
        tournament = self.get_object()
        data = dict(self.get_serializer(tournament).data)
        data.update(enhance_tournament(tournament, include_season=True, include_tier=True, include_course=True))

        golfers = TournamentGolfer.objects \
            .filter(tournament=tournament) \
            .select_related("golfer") \
            .order_by("position", "golfer__player_name")
        teams = Team.objects \
            .filter(tournament=tournament) \
            .select_related("tour_card") \
            .order_by("score", "id")

        team_rows = []
        for team in teams:
            row = dict(TeamSerializer(team).data)
            row["tour_card_detail"] = TourCardSerializer(team.tour_card).data
            row["points_before_tournament"] = points_before_tournament(team.tour_card_id, tournament)
            team_rows.append(row)

        golfer_rows = []
        for tournament_golfer in golfers:
            golfer_rows.append({
                "id": tournament_golfer.id,
                "golfer_id": tournament_golfer.golfer_id,
                "api_id": tournament_golfer.golfer.api_id,
                "player_name": tournament_golfer.golfer.player_name,
                "country": tournament_golfer.golfer.country,
                "position": tournament_golfer.position,
                "score": tournament_golfer.score,
                "today": tournament_golfer.today,
                "thru": tournament_golfer.thru,
                "round": tournament_golfer.round,
                "make_cut": tournament_golfer.make_cut,
                "group": tournament_golfer.group,
                "rating": tournament_golfer.rating,
                "world_rank": tournament_golfer.world_rank,
                "usage": tournament_golfer.usage,
            })

        member = member_for_user(request.user) if request.user.is_authenticated else None
        tour_card = TourCard.objects.filter(member=member, season=tournament.season).first() \
            if member is not None else None

        return Response({
            "tournament": data,
            "tours": TourSerializer(Tour.objects.filter(season=tournament.season), many=True).data,
            "golfers": golfer_rows,
            "teams": team_rows,
            "member": SimpleMemberSerializer(member).data if member is not None else None,
            "tour_card": TourCardSerializer(tour_card).data if tour_card is not None else None,
        })

    @action(detail=True, methods=["post"], permission_classes=[IsAdmin])
    def create_groups(self, request, pk):
        tournament = self.get_object()
        dry_run = to_bool(request.data.get("dry_run", False))
        result = create_groups(tournament, dry_run=dry_run)
        if not dry_run and result["changed"]:
            log_audit(request, "tournaments", tournament.id, "updated", metadata={"groups": result["groups"]})
        return Response(result)

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def pick_pool(self, request, pk):
        tournament = self.get_object()
        golfers = TournamentGolfer.objects \
            .filter(tournament=tournament) \
            .select_related("golfer") \
            .order_by("group", "world_rank", "golfer__player_name")

        return Response([{
            "api_id": tournament_golfer.golfer.api_id,
            "player_name": tournament_golfer.golfer.player_name,
            "group": tournament_golfer.group,
            "world_rank": tournament_golfer.world_rank,
            "rating": tournament_golfer.rating,
        } for tournament_golfer in golfers])
