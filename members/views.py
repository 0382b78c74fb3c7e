import structlog

from django.contrib.auth.models import User
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.audit import compute_changes, log_audit
from core.exceptions import DuplicateRecordError, ValidationFailedError
from core.permissions import IsAdmin, is_admin
from core.query import matches_where, order_by_key
from core.util import safe_int, to_bool
from core.views import OptionsQueryMixin
from members.managers import validate_member_data
from teams.models import Team
from .models import Member
from .serializers import MemberSerializer, MemberCreateSerializer, MemberMergeSerializer, MemberDeleteSerializer, \
    SimpleMemberSerializer
from .utils import SORT_FIELDS, enhance_member, generate_member_analytics, matches_filters, member_field_value, \
    normalize_email, normalize_person_name

logger = structlog.get_logger(__name__)

SELF_EDITABLE_FIELDS = ("first_name", "last_name", "display_name")
ADMIN_EDITABLE_FIELDS = SELF_EDITABLE_FIELDS + ("email", "role", "account", "is_active")


class MemberViewSet(OptionsQueryMixin, viewsets.ModelViewSet):
    serializer_class = MemberSerializer
    permission_classes = [permissions.IsAuthenticated]
    entity_name = "Member"
    filter_params = {
        "email": str,
        "user": int,
        "role": str,
        "is_active": bool,
        "min_balance": int,
        "max_balance": int,
        "has_balance": bool,
        "has_friends": bool,
        "is_online": bool,
        "search_term": str,
        "created_after": "datetime",
        "created_before": "datetime",
        "updated_after": "datetime",
        "updated_before": "datetime",
        "last_login_after": "datetime",
        "last_login_before": "datetime",
    }
    enhance_params = ("include_friends", "include_tour_cards", "include_teams", "include_analytics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_permissions(self):
        if self.action in ("create", "destroy"):
            return [IsAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        return Member.objects.select_related("user").prefetch_related("friends")

    def get_query_records(self, options):
        queryset = self.get_queryset()
        criteria = options["filter"]
        if "email" in criteria:
            queryset = queryset.filter(email=normalize_email(criteria["email"]))
        if "user" in criteria:
            queryset = queryset.filter(user=criteria["user"])
        return queryset

    def get_record_sort(self, options):
        if options.get("order_by"):
            key = order_by_key(options["order_by"], member_field_value)
            return lambda items: sorted(items, key=key)
        return super().get_record_sort(options)

    def get_record_filter(self, options):
        base = super().get_record_filter(options)
        where = options.get("where")
        if not where:
            return base
        if base is None:
            return lambda member: matches_where(member, where, member_field_value)
        return lambda member: base(member) and matches_where(member, where, member_field_value)

    def get_extra_fields(self, record, enhance):
        return enhance_member(
            record,
            include_friends=enhance.get("include_friends", False),
            include_tour_cards=enhance.get("include_tour_cards", False),
            include_teams=enhance.get("include_teams", False),
        )

    def run_query(self, options):
        results = super().run_query(options)
        if options["enhance"].get("include_analytics") and isinstance(results, list):
            members = list(Member.objects.filter(pk__in=[m["id"] for m in results]).prefetch_related("friends"))
            return {"results": results, "analytics": generate_member_analytics(members)}
        return results

    def create(self, request, *args, **kwargs):
        serializer = MemberCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        member = serializer.save()
        log_audit(request, "members", member.id, "created", metadata={"email": member.email})
        return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        member = self.get_object()
        admin = is_admin(request.user)
        if not admin and member.user_id != request.user.id:
            raise PermissionDenied("You can only update your own member profile")

        allowed = ADMIN_EDITABLE_FIELDS if admin else SELF_EDITABLE_FIELDS
        forbidden = [field for field in request.data.keys() if field in ADMIN_EDITABLE_FIELDS and field not in allowed]
        if forbidden:
            raise PermissionDenied(f"Only admins can change: {', '.join(forbidden)}")

        data = {field: request.data[field] for field in allowed if field in request.data}
        if "email" in data:
            data["email"] = normalize_email(data["email"])
            if Member.objects.filter(email=data["email"]).exclude(pk=member.pk).exists():
                raise DuplicateRecordError("Member with this email already exists")
        if "role" in data and data["role"] not in ("admin", "moderator", "regular"):
            raise ValidationFailedError("role must be admin, moderator or regular")
        validate_member_data(data)
        for field in ("first_name", "last_name"):
            if field in data:
                data[field] = normalize_person_name(data[field])

        before = {field: getattr(member, field) for field in data}
        for field, value in data.items():
            setattr(member, field, value)
        member.save()

        changes = compute_changes(before, data)
        if changes:
            log_audit(request, "members", member.id, "updated", changes=changes)

        return Response(MemberSerializer(member).data)

    def destroy(self, request, *args, **kwargs):
        member = self.get_object()
        serializer = MemberDeleteSerializer(data=request.data or request.query_params.dict())
        serializer.is_valid(raise_exception=True)
        result = Member.objects.delete_member(member, **serializer.validated_data)
        log_audit(request, "members", kwargs.get("pk"), "deleted", metadata=result)
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def me(self, request):
        member = Member.objects.ensure_for_user(request.user)
        return Response(MemberSerializer(member).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAdmin])
    def link_user(self, request, pk):
        member = self.get_object()
        user = get_object_or_404(User, pk=request.data.get("user"))
        Member.objects.link_user(member, user)
        log_audit(request, "members", member.id, "updated", changes={"user": {"old": None, "new": user.id}})
        return Response(MemberSerializer(member).data)

    @action(detail=False, methods=["get"])
    def friends(self, request):
        member = Member.objects.ensure_for_user(request.user)
        serializer = SimpleMemberSerializer(member.friends.all(), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["post"])
    def add_friend(self, request, pk):
        member = Member.objects.ensure_for_user(request.user)
        friend = get_object_or_404(Member, pk=pk)
        if friend.pk == member.pk:
            raise ValidationFailedError("You cannot add yourself as a friend")
        member.friends.add(friend)
        serializer = SimpleMemberSerializer(member.friends.all(), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["delete"])
    def remove_friend(self, request, pk):
        member = Member.objects.ensure_for_user(request.user)
        friend = get_object_or_404(Member, pk=pk)
        member.friends.remove(friend)
        serializer = SimpleMemberSerializer(member.friends.all(), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=["get"])
    def tournament_history(self, request, pk):
        member = self.get_object()
        teams = Team.objects \
            .filter(tour_card__member=member) \
            .select_related("tournament", "tour_card", "tour_card__tour") \
            .order_by("-tournament__start_date")

        history = [{
            "team_id": team.id,
            "tournament_id": team.tournament_id,
            "tournament_name": team.tournament.name,
            "start_date": team.tournament.start_date,
            "end_date": team.tournament.end_date,
            "tour_card_id": team.tour_card_id,
            "tour": team.tour_card.tour.short_form,
            "position": team.position,
            "score": team.score,
            "earnings": team.earnings,
            "points": team.points,
        } for team in teams]
        return Response(history)

    @action(detail=False, methods=["get"], permission_classes=[IsAdmin])
    def merge_preview(self, request):
        source = get_object_or_404(Member, pk=request.query_params.get("source"))
        target_id = request.query_params.get("target")
        target = get_object_or_404(Member, pk=target_id) if target_id else None
        return Response(Member.objects.merge_preview(source, target))

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def merge(self, request):
        serializer = MemberMergeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        source = serializer.validated_data["source"]
        target = serializer.validated_data["target"]
        source_id = source.id

        with transaction.atomic():
            result = Member.objects.merge(source, target, serializer.validated_data["overwrite_user"])
            log_audit(request, "members", target.id, "updated", metadata={"merged_from": source_id, **result})

        return Response(result)

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def recompute_active_flags(self, request):
        return Response(Member.objects.recompute_active_flags())

    @action(detail=False, methods=["post"], permission_classes=[IsAdmin])
    def normalize_names(self, request):
        dry_run = to_bool(request.data.get("dry_run", False))
        limit = safe_int(request.data.get("limit"), None)
        return Response(Member.objects.normalize_names(dry_run=dry_run, limit=limit))
