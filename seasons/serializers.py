from rest_framework import serializers

from core.exceptions import ValidationFailedError
from .models import Season
from .utils import season_errors


class SeasonSerializer(serializers.ModelSerializer):

    class Meta:
        model = Season
        fields = ("id", "year", "number", "start_date", "end_date", "registration_deadline", "created_date",
                  "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )

    def validate(self, attrs):
        instance = self.instance

        def value(field):
            if field in attrs:
                return attrs[field]
            return getattr(instance, field, None) if instance is not None else None

        number = value("number")
        if number is None:
            number = 1
        errors = season_errors(value("year"), number, value("start_date"), value("end_date"),
                               value("registration_deadline"))
        if errors:
            raise ValidationFailedError(errors)
        return attrs
