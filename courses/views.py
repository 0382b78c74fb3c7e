import structlog

from django.conf import settings
from django.db import transaction
from rest_framework import status, viewsets
from rest_framework.response import Response

from core.audit import log_audit
from core.exceptions import CourseInUseError, NotFoundError, TooManyRecordsError
from core.permissions import IsAdminOrReadOnly
from core.util import to_bool
from core.views import AuditedWriteMixin, OptionsQueryMixin
from golfers.models import TournamentGolfer
from teams.models import Team
from tournaments.models import Tournament
from .models import Course
from .serializers import CourseSerializer
from .utils import SORT_FIELDS, enhance_course, matches_filters

logger = structlog.get_logger(__name__)


class CourseViewSet(OptionsQueryMixin, AuditedWriteMixin, viewsets.ModelViewSet):
    queryset = Course.objects.all()
    serializer_class = CourseSerializer
    permission_classes = [IsAdminOrReadOnly]
    entity_name = "Course"
    audit_entity_type = "courses"
    filter_params = {
        "api_id": str,
        "name": str,
        "location": str,
        "par": int,
        "min_par": int,
        "max_par": int,
        "time_zone_offset": float,
        "search_term": str,
    }
    enhance_params = ("include_tournaments", "include_statistics")
    sort_fields = SORT_FIELDS
    filter_function = staticmethod(matches_filters)

    def get_extra_fields(self, record, enhance):
        return enhance_course(record, **enhance)

    @transaction.atomic()
    def destroy(self, request, *args, **kwargs):
        course = self.get_object()
        options = request.data if request.data else request.query_params
        cascade = to_bool(options.get("cascade", False))
        replacement_id = options.get("replacement_course", None)

        tournaments = Tournament.objects.filter(course=course)
        count = tournaments.count()
        metadata = {"tournament_count": count}

        if count and replacement_id:
            replacement = Course.objects.filter(pk=replacement_id).exclude(pk=course.pk).first()
            if replacement is None:
                raise NotFoundError("Replacement course")
            tournaments.update(course=replacement)
            metadata["replacement_course"] = replacement.id
        elif count and cascade:
            golfers = TournamentGolfer.objects.filter(tournament__in=tournaments)
            teams = Team.objects.filter(tournament__in=tournaments)
            dependents = golfers.count() + teams.count()
            if dependents > settings.TOURNAMENT_DELETE_LIMIT:
                raise TooManyRecordsError(dependents, settings.TOURNAMENT_DELETE_LIMIT)
            golfers.delete()
            teams.delete()
            tournaments.delete()
            metadata["cascade"] = True
        elif count:
            raise CourseInUseError(count)

        course_id = course.id
        course.delete()
        log_audit(request, "courses", course_id, "deleted", metadata=metadata)
        logger.info("Course deleted", course_id=course_id, **metadata)

        return Response({"deleted": True, **metadata}, status=status.HTTP_200_OK)
