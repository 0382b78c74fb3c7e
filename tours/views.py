import structlog

from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.permissions import IsAdmin, IsAdminOrReadOnly, is_admin, member_for_user
from core.util import current_year
from core.views import AuditedWriteMixin, OptionsQueryMixin
from seasons.models import Season
from .models import Tour, TourCard
from .serializers import TourCardSerializer, TourSerializer, TourSwitchSerializer
from .utils import TOUR_CARD_SORT_FIELDS, TOUR_SORT_FIELDS, enhance_tour, enhance_tour_card, \
    tour_card_matches_filters, tour_matches_filters

logger = structlog.get_logger(__name__)


class TourViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    serializer_class = TourSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Tour"
    audit_entity_type = "tours"
    filter_params = {
        "season": int,
        "name": str,
        "short_form": str,
        "min_buy_in": int,
        "max_buy_in": int,
        "search_term": str,
    }
    enhance_params = ("include_season", "include_tour_cards", "include_statistics")
    sort_fields = TOUR_SORT_FIELDS
    filter_function = staticmethod(tour_matches_filters)

    def get_queryset(self):
        return Tour.objects.select_related("season")

    def get_query_records(self, options):
        queryset = self.get_queryset()
        if "season" in options["filter"]:
            queryset = queryset.filter(season=options["filter"]["season"])
        return queryset

    def get_extra_fields(self, record, enhance):
        return enhance_tour(record, **enhance)


class TourCardViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    serializer_class = TourCardSerializer
    entity_name = "Tour card"
    audit_entity_type = "tour_cards"
    filter_params = {
        "season": int,
        "tour": int,
        "member": int,
        "min_points": int,
        "min_earnings": int,
        "playoff": int,
        "search_term": str,
    }
    enhance_params = ("include_member", "include_tour", "include_season", "include_teams")
    sort_fields = TOUR_CARD_SORT_FIELDS
    filter_function = staticmethod(tour_card_matches_filters)

    def get_permissions(self):
        if self.action in ("update", "partial_update", "destroy"):
            return [IsAdmin()]
        if self.action in ("create", "switch", "current"):
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        return TourCard.objects.select_related("tour", "season", "member")

    def get_query_records(self, options):
        queryset = self.get_queryset()
        for field in ("season", "tour", "member"):
            if field in options["filter"]:
                queryset = queryset.filter(**{field: options["filter"][field]})
        return queryset

    def get_extra_fields(self, record, enhance):
        return enhance_tour_card(record, **enhance)

    def check_owner(self, member):
        if is_admin(self.request.user):
            return
        if member is None or member_for_user(self.request.user) != member:
            raise PermissionDenied("Only the tour card owner or an admin can do this")

    def perform_create(self, serializer):
        # create_card writes its own audit entry
        self.check_owner(serializer.validated_data.get("member"))
        serializer.save()

    @action(detail=True, methods=["put"])
    def switch(self, request, pk):
        card = self.get_object()
        self.check_owner(card.member)
        serializer = TourSwitchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        card = TourCard.objects.switch_tour(card, serializer.validated_data["tour"], actor=request)
        return Response(self.get_serializer(card).data)

    @action(detail=True, methods=["delete"], permission_classes=[IsAdmin])
    def delete_with_fee(self, request, pk):
        card = self.get_object()
        result = TourCard.objects.delete_with_fee(card, actor=request)
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def recompute(self, request):
        season = get_object_or_404(Season, pk=request.data.get("season"))
        return Response(TourCard.objects.recompute_for_season(season))

    @action(detail=False, methods=["get"], permission_classes=[IsAdmin])
    def missing_members(self, request):
        season = get_object_or_404(Season, pk=request.query_params.get("season"))
        members = TourCard.objects.missing_members(season)
        return Response([{
            "id": member.id,
            "email": member.email,
            "first_name": member.first_name,
            "last_name": member.last_name,
            "display_name": member.effective_display_name(),
            "previous_season_cards": member.previous_season_cards,
        } for member in members])

    @action(detail=False, methods=["get"])
    def current(self, request):
        card = TourCard.objects.current_for_member(member_for_user(request.user), current_year())
        return Response(self.get_serializer(card).data if card is not None else None)
