from rest_framework import serializers

from core.exceptions import DuplicateRecordError
from .models import Course
from .utils import validate_course_data


class CourseSerializer(serializers.ModelSerializer):

    class Meta:
        model = Course
        fields = ("id", "api_id", "name", "location", "par", "front", "back", "time_zone_offset",
                  "created_date", "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )
        extra_kwargs = {"api_id": {"validators": []}}

    def validate(self, attrs):
        for field in ("api_id", "name", "location"):
            if isinstance(attrs.get(field), str):
                attrs[field] = attrs[field].strip()

        merged = {}
        if self.instance is not None:
            merged.update({field: getattr(self.instance, field) for field in
                           ("api_id", "name", "location", "par", "front", "back", "time_zone_offset")})
        else:
            merged.update({"par": 72, "front": 36, "back": 36, "time_zone_offset": 0})
        merged.update(attrs)
        validate_course_data(merged)

        duplicates = Course.objects.filter(api_id=merged["api_id"])
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise DuplicateRecordError("Course with this api_id already exists")

        return attrs
