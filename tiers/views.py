import structlog

from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.response import Response

from core.audit import log_audit
from core.exceptions import NotFoundError, TierInUseError
from core.permissions import IsAdminOrReadOnly
from core.views import AuditedWriteMixin, OptionsQueryMixin
from tournaments.models import Tournament
from .models import Tier
from .serializers import TierSerializer
from .utils import SORT_FIELDS, enhance_tier, matches_filters

logger = structlog.get_logger(__name__)


class TierViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    serializer_class = TierSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Tier"
    audit_entity_type = "tiers"
    filter_params = {
        "season": int,
        "name": str,
        "min_payouts": int,
        "max_payouts": int,
        "min_points": int,
        "max_points": int,
        "payout_levels": int,
        "point_levels": int,
        "search_term": str,
    }
    enhance_params = ("include_season", "include_tournaments", "include_statistics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_queryset(self):
        queryset = Tier.objects.select_related("season")
        season = self.request.query_params.get("season", None)
        if season is not None and self.action != "list":
            queryset = queryset.filter(season=season)
        return queryset

    def get_query_records(self, options):
        queryset = self.get_queryset()
        if "season" in options["filter"]:
            queryset = queryset.filter(season=options["filter"]["season"])
        return queryset

    def get_extra_fields(self, record, enhance):
        return enhance_tier(record, **enhance)

    @transaction.atomic()
    def destroy(self, request, *args, **kwargs):
        tier = self.get_object()
        reassign_to = request.data.get("reassign_to") or request.query_params.get("reassign_to")
        tournaments = Tournament.objects.filter(tier=tier)
        transferred = 0

        if reassign_to:
            target = Tier.objects.filter(pk=reassign_to).exclude(pk=tier.pk).first()
            if target is None:
                raise NotFoundError("Target tier for tournament reassignment")
            transferred = tournaments.update(tier=target)
        elif tournaments.exists():
            raise TierInUseError(tournaments.count())

        tier_id = tier.id
        tier.delete()
        log_audit(request, "tiers", tier_id, "deleted", metadata={"transferred_count": transferred})
        logger.info("Tier deleted", tier_id=tier_id, transferred=transferred)

        return Response({"deleted": True, "transferred_count": transferred}, status=status.HTTP_200_OK)
