from datetime import timedelta

import djoser.views
import structlog
from django.conf import settings as django_settings
from djoser import utils
from djoser.conf import settings
from rest_framework import status, permissions, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from core.audit import compute_changes, log_audit
from core.exceptions import NotFoundError
from core.models import AuditLog
from core.permissions import IsAdmin
from core.query import get_sort_function, parse_query_options, process_data
from core.serializers import AuditLogSerializer
from core.tasks import debug_task

logger = structlog.get_logger(__name__)


class OptionsQueryMixin:
    """
    List support for the options-driven query pipeline. A ViewSet declares the
    filters, sort fields and enhance flags it understands; list() reads them from
    the query string and the `query` action reads them from a JSON body.
    """
    entity_name = "Record"
    filter_params = {}
    enhance_params = ()
    sort_fields = {}
    filter_function = None

    def get_query_records(self, options):
        return self.get_queryset()

    def get_extra_fields(self, record, enhance):
        return {}

    def serialize_record(self, record, enhance):
        data = dict(self.get_serializer(record).data)
        if enhance:
            data.update(self.get_extra_fields(record, enhance))
        return data

    def get_query_options(self, params):
        return parse_query_options(params, self.filter_params, self.enhance_params, self.sort_fields.keys())

    def get_record_filter(self, options):
        criteria = options["filter"]
        if not criteria or self.filter_function is None:
            return None
        return lambda record: self.filter_function(record, criteria)

    def get_record_sort(self, options):
        sort = options["sort"]
        return get_sort_function(sort.get("sort_by"), sort.get("sort_order"), self.sort_fields)

    def run_query(self, options):
        records = self.get_query_records(options)
        enhance = options["enhance"]

        if "id" in options:
            record = records.filter(pk=options["id"]).first()
            if record is None:
                raise NotFoundError(self.entity_name)
            return self.serialize_record(record, enhance)

        if "ids" in options:
            records = records.filter(pk__in=options["ids"])

        pagination = options["pagination"]
        results = process_data(
            records,
            filter=self.get_record_filter(options),
            sort=self.get_record_sort(options),
            limit=pagination.get("limit"),
            skip=pagination.get("offset"),
        )
        return [self.serialize_record(record, enhance) for record in results]

    def list(self, request, *args, **kwargs):
        options = self.get_query_options(request.query_params)
        return Response(self.run_query(options))

    @action(detail=False, methods=["post"], permission_classes=[permissions.IsAuthenticated])
    def query(self, request):
        options = self.get_query_options(request.data)
        return Response(self.run_query(options))


class AuditedWriteMixin:
    """Write audit entries for the default create, update and destroy actions."""
    audit_entity_type = None

    def perform_create(self, serializer):
        instance = serializer.save()
        log_audit(self.request, self.audit_entity_type, instance.pk, "created")

    def perform_update(self, serializer):
        before = {field: getattr(serializer.instance, field, None) for field in serializer.validated_data}
        instance = serializer.save()
        changes = compute_changes(before, serializer.validated_data)
        if changes:
            log_audit(self.request, self.audit_entity_type, instance.pk, "updated", changes=changes)

    def perform_destroy(self, instance):
        pk = instance.pk
        instance.delete()
        log_audit(self.request, self.audit_entity_type, pk, "deleted")


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        queryset = AuditLog.objects.select_related("member")
        member_id = self.request.query_params.get("member", None)
        entity_type = self.request.query_params.get("entity_type", None)
        entity_id = self.request.query_params.get("entity_id", None)
        audit_action = self.request.query_params.get("action", None)
        limit = self.request.query_params.get("limit", None)

        if member_id is not None:
            queryset = queryset.filter(member=member_id)
        if entity_type is not None:
            queryset = queryset.filter(entity_type=entity_type)
        if entity_id is not None:
            queryset = queryset.filter(entity_id=entity_id)
        if audit_action is not None:
            queryset = queryset.filter(action=audit_action)

        queryset = queryset.order_by("-created_date", "-id")
        if self.action == "list" and limit is not None and limit.isdigit():
            queryset = queryset[:int(limit)]

        return queryset


def _cookie_domain():
    return None if django_settings.DEBUG else django_settings.API_DOMAIN


class TokenCreateView(djoser.views.TokenCreateView):
    def _action(self, serializer):
        token = utils.login_user(self.request, serializer.user)
        token_serializer_class = settings.SERIALIZERS.token

        response = Response()
        data = token_serializer_class(token).data

        response.set_cookie(
            key="access_token",
            path="/",
            value=data["auth_token"],
            max_age=timedelta(days=30),
            secure=not django_settings.DEBUG,
            httponly=True,
            samesite="Lax",
            domain=_cookie_domain(),
        )

        logger.info("User logged in", user_id=serializer.user.id)
        response.data = "Welcome!"
        response.status_code = status.HTTP_200_OK
        return response


class TokenDestroyView(djoser.views.TokenDestroyView):
    """Use this endpoint to logout user (remove user authentication token)."""

    permission_classes = settings.PERMISSIONS.token_destroy

    def post(self, request):
        response = Response()
        response.delete_cookie(
            key="access_token",
            path="/",
            samesite="Lax",
            domain=_cookie_domain(),
        )
        response.status_code = status.HTTP_204_NO_CONTENT
        utils.logout_user(request)
        return response


@api_view(("GET",))
@permission_classes((IsAdmin,))
def ping_celery(request):
    result = debug_task.delay()
    return Response({"task_id": result.id}, status=status.HTTP_200_OK)
