from rest_framework import serializers

from core.exceptions import DuplicateRecordError
from .models import Tournament
from .utils import get_calculated_status, validate_tournament_data

TOURNAMENT_FIELDS = ("name", "start_date", "end_date", "tier", "course", "season", "logo_url", "api_id", "status",
                     "current_round", "live_play")


class TournamentSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=["upcoming", "active", "completed", "cancelled"], required=False)

    class Meta:
        model = Tournament
        fields = ("id", "name", "start_date", "end_date", "tier", "course", "season", "logo_url", "api_id",
                  "status", "current_round", "live_play", "leaderboard_updated_at", "created_date",
                  "updated_at", )
        read_only_fields = ("id", "leaderboard_updated_at", "created_date", "updated_at", )
        validators = []

    def validate(self, attrs):
        if isinstance(attrs.get("name"), str):
            attrs["name"] = attrs["name"].strip()

        merged = {}
        if self.instance is not None:
            merged.update({field: getattr(self.instance, field) for field in TOURNAMENT_FIELDS})
        merged.update(attrs)
        validate_tournament_data(merged)

        if self.instance is None or "name" in attrs or "season" in attrs:
            duplicates = Tournament.objects.filter(name=merged["name"], season=merged["season"])
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise DuplicateRecordError("Tournament with this name already exists in the season")

        return attrs

    def create(self, validated_data):
        if not validated_data.get("status"):
            validated_data["status"] = get_calculated_status(validated_data["start_date"],
                                                             validated_data["end_date"])
        return super().create(validated_data)
