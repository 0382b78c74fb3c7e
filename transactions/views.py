import structlog

from django.shortcuts import get_object_or_404
from rest_framework import pagination, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.permissions import IsAdmin, is_admin, member_for_user
from core.views import OptionsQueryMixin
from seasons.models import Season
from .models import Transaction
from .serializers import ReconcileSerializer, TransactionSerializer
from .utils import SORT_FIELDS, enhance_transaction, matches_filters

logger = structlog.get_logger(__name__)


class TransactionPagination(pagination.CursorPagination):
    page_size = 25
    page_size_query_param = "size"
    max_page_size = 200
    ordering = ("-created_date", "-id")


class TransactionViewSet(OptionsQueryMixin, viewsets.ModelViewSet):
    serializer_class = TransactionSerializer
    permission_classes = [permissions.IsAuthenticated]
    entity_name = "Transaction"
    filter_params = {
        "member": int,
        "season": int,
        "transaction_type": str,
        "status": str,
        "min_amount": int,
        "max_amount": int,
        "processed_after": "datetime",
        "processed_before": "datetime",
        "mine": bool,
    }
    enhance_params = ("include_member", "include_season")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update", "destroy"):
            return [IsAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = Transaction.objects.select_related("member", "season")
        if not is_admin(self.request.user):
            member = member_for_user(self.request.user)
            if member is None:
                return queryset.none()
            queryset = queryset.filter(member=member)
        return queryset

    def get_query_records(self, options):
        queryset = self.get_queryset()
        criteria = options["filter"]
        if criteria.get("mine"):
            member = member_for_user(self.request.user)
            if member is None:
                return queryset.none()
            queryset = queryset.filter(member=member)
        if "member" in criteria:
            queryset = queryset.filter(member=criteria["member"])
        if "season" in criteria:
            queryset = queryset.filter(season=criteria["season"])
        return queryset

    def get_extra_fields(self, record, enhance):
        return enhance_transaction(record, **enhance)

    def destroy(self, request, *args, **kwargs):
        tx = self.get_object()
        result = Transaction.objects.delete_transaction(tx, actor=request)
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def page(self, request):
        paginator = TransactionPagination()
        queryset = self.get_query_records(self.get_query_options(request.query_params))
        records = paginator.paginate_queryset(queryset, request, view=self)
        return paginator.get_paginated_response(self.get_serializer(records, many=True).data)

    @action(detail=False, methods=["get"], permission_classes=[IsAdmin])
    def member_account_audit(self, request):
        return Response(Transaction.objects.member_account_audit())

    @action(detail=False, methods=["get"], permission_classes=[IsAdmin])
    def tournament_winnings_audit(self, request):
        season = get_object_or_404(Season, pk=request.query_params.get("season"))
        return Response(Transaction.objects.tournament_winnings_audit(season))

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def reconcile(self, request):
        serializer = ReconcileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(Transaction.objects.reconcile(serializer.validated_data["member"], actor=request))

    @action(detail=False, methods=["get"], permission_classes=[IsAdmin])
    def summary(self, request):
        season_id = request.query_params.get("season", None)
        season = get_object_or_404(Season, pk=season_id) if season_id else None
        return Response(Transaction.objects.summary(season))
