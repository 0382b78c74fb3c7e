from rest_framework import serializers

from core.exceptions import DuplicateRecordError, ValidationFailedError
from .models import Team
from .utils import ROUND_FIELDS, validate_team_data

VALIDATED_FIELDS = ("golfer_ids", "earnings", "points", "round") + ROUND_FIELDS


class TeamSerializer(serializers.ModelSerializer):

    class Meta:
        model = Team
        fields = ("id", "tournament", "tour_card", "golfer_ids", "earnings", "points", "make_cut", "position",
                  "past_position", "score", "top_ten", "top_five", "top_three", "win", "today", "thru", "round",
                  "round_one", "round_two", "round_three", "round_four", "round_one_tee_time",
                  "round_two_tee_time", "round_three_tee_time", "round_four_tee_time", "created_date",
                  "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )
        validators = []

    def validate(self, attrs):
        validate_team_data({field: attrs[field] for field in VALIDATED_FIELDS if field in attrs})

        tournament = attrs.get("tournament", getattr(self.instance, "tournament", None))
        tour_card = attrs.get("tour_card", getattr(self.instance, "tour_card", None))
        if tournament is not None and tour_card is not None:
            if tournament.season_id != tour_card.season_id:
                raise ValidationFailedError("Tour card season does not match tournament season")
            duplicates = Team.objects.filter(tournament=tournament, tour_card=tour_card)
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise DuplicateRecordError("Team already exists for this tour card and tournament")
        return attrs


class SeedTeamsSerializer(serializers.Serializer):
    tournament = serializers.IntegerField()
    tour = serializers.IntegerField(required=False, allow_null=True, default=None)
    size = serializers.IntegerField(required=False, min_value=1, max_value=20, default=6)
    dry_run = serializers.BooleanField(required=False, default=False)


class ScoreTeamsSerializer(serializers.Serializer):
    tournament = serializers.IntegerField()
    dry_run = serializers.BooleanField(required=False, default=False)
