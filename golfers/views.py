import structlog

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.audit import log_audit
from core.permissions import IsAdminOrReadOnly, IsModerator
from core.util import safe_int, to_bool
from core.views import AuditedWriteMixin, OptionsQueryMixin
from .datagolf import DataGolfAPIError, DataGolfAuthError
from .models import Golfer, TournamentGolfer
from .serializers import GolferSerializer, GolferSyncSerializer, TournamentGolferSerializer
from .services import normalize_golfer_names, sync_golfers_from_datagolf
from .utils import SORT_FIELDS, enhance_golfer, matches_filters

logger = structlog.get_logger(__name__)


class GolferViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    queryset = Golfer.objects.all()
    serializer_class = GolferSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Golfer"
    audit_entity_type = "golfers"
    filter_params = {
        "api_id": int,
        "player_name": str,
        "country": str,
        "min_rank": int,
        "max_rank": int,
        "search_term": str,
        "ranked": bool,
    }
    enhance_params = ("include_tournaments", "include_statistics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_extra_fields(self, record, enhance):
        return enhance_golfer(record, **enhance)

    @action(detail=False, methods=["post"], permission_classes=[IsModerator])
    def upsert(self, request):
        existing = Golfer.objects.filter(api_id=safe_int(request.data.get("api_id"), None)).first()
        serializer = GolferSerializer(existing, data=request.data, partial=existing is not None)
        serializer.is_valid(raise_exception=True)
        golfer = serializer.save()

        created = existing is None
        log_audit(request, "golfers", golfer.id, "created" if created else "updated")
        return Response(GolferSerializer(golfer).data,
                        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @action(detail=False, methods=["post"], permission_classes=[IsModerator])
    def normalize_names(self, request):
        result = normalize_golfer_names(dry_run=to_bool(request.data.get("dry_run", False)))
        return Response(result)

    @action(detail=False, methods=["post"], permission_classes=[IsModerator])
    def sync(self, request):
        serializer = GolferSyncSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = sync_golfers_from_datagolf(**serializer.validated_data)
        except DataGolfAuthError as e:
            logger.error("DataGolf authentication failed", error=str(e))
            return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except DataGolfAPIError as e:
            logger.error("DataGolf sync failed", error=str(e))
            return Response({"error": str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        if not result["dry_run"]:
            log_audit(request, "golfers", "sync", "updated", metadata=result)
        return Response(result)


class TournamentGolferViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    serializer_class = TournamentGolferSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Tournament golfer"
    audit_entity_type = "tournament_golfers"
    filter_params = {
        "tournament": int,
        "golfer": int,
        "group": int,
        "make_cut": bool,
    }
    sort_fields = {
        "position": lambda g: g.position,
        "score": lambda g: g.score,
        "world_rank": lambda g: g.world_rank,
        "rating": lambda g: g.rating,
        "group": lambda g: g.group,
        "earnings": lambda g: g.earnings,
    }

    def get_queryset(self):
        return TournamentGolfer.objects.select_related("golfer", "tournament")

    def get_query_records(self, options):
        queryset = self.get_queryset()
        for field, value in options["filter"].items():
            queryset = queryset.filter(**{field: value})
        return queryset
