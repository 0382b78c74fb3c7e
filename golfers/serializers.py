from rest_framework import serializers

from core.exceptions import DuplicateRecordError
from core.validators import collect_errors, number_range, string_length
from .models import Golfer, TournamentGolfer
from .utils import normalize_country, normalize_player_name, rank_display


class GolferSerializer(serializers.ModelSerializer):

    class Meta:
        model = Golfer
        fields = ("id", "api_id", "player_name", "country", "world_rank", "created_date", "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )
        extra_kwargs = {"api_id": {"validators": []}}

    def validate(self, attrs):
        if "player_name" in attrs:
            attrs["player_name"] = normalize_player_name(attrs["player_name"])
        if "country" in attrs:
            attrs["country"] = normalize_country(attrs["country"])
        collect_errors(
            string_length(attrs.get("player_name"), 2, 100, "Player name"),
            number_range(attrs.get("api_id"), 1, None, "api_id"),
            number_range(attrs.get("world_rank"), 1, None, "world_rank"),
        )

        if "api_id" in attrs:
            duplicates = Golfer.objects.filter(api_id=attrs["api_id"])
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise DuplicateRecordError("Golfer with this api_id already exists")
        return attrs


class SimpleGolferSerializer(serializers.ModelSerializer):
    rank_display = serializers.SerializerMethodField()

    class Meta:
        model = Golfer
        fields = ("id", "api_id", "player_name", "country", "world_rank", "rank_display", )

    def get_rank_display(self, obj):
        return rank_display(obj.world_rank)


class TournamentGolferSerializer(serializers.ModelSerializer):
    golfer_detail = SimpleGolferSerializer(source="golfer", read_only=True)

    class Meta:
        model = TournamentGolfer
        fields = ("id", "golfer", "golfer_detail", "tournament", "position", "pos_change", "score", "make_cut",
                  "top_ten", "win", "earnings", "today", "thru", "round", "end_hole", "group", "rating",
                  "world_rank", "usage", "round_one", "round_two", "round_three", "round_four", "created_date",
                  "updated_at", )
        read_only_fields = ("id", "golfer_detail", "created_date", "updated_at", )
        validators = []

    def validate(self, attrs):
        collect_errors(
            number_range(attrs.get("round"), 1, 5, "round"),
            number_range(attrs.get("thru"), 0, 18, "thru"),
            number_range(attrs.get("earnings"), 0, None, "earnings"),
            *[number_range(attrs.get(field), 0, 200, field)
              for field in ("round_one", "round_two", "round_three", "round_four")],
        )

        golfer = attrs.get("golfer", getattr(self.instance, "golfer", None))
        tournament = attrs.get("tournament", getattr(self.instance, "tournament", None))
        duplicates = TournamentGolfer.objects.filter(golfer=golfer, tournament=tournament)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise DuplicateRecordError("Golfer is already entered in this tournament")
        return attrs


class GolferSyncSerializer(serializers.Serializer):
    dry_run = serializers.BooleanField(required=False, default=False)
    limit = serializers.IntegerField(required=False, min_value=1, allow_null=True, default=None)
