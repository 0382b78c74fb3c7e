from rest_framework import serializers

from core.exceptions import DuplicateRecordError
from members.models import Member
from .models import Tour, TourCard
from .utils import STAT_FIELDS, validate_tour_card_stats, validate_tour_data


class TourSerializer(serializers.ModelSerializer):

    class Meta:
        model = Tour
        fields = ("id", "name", "short_form", "logo_url", "season", "buy_in", "playoff_spots", "max_participants",
                  "created_date", "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )
        validators = []

    def validate(self, attrs):
        for field in ("name", "short_form"):
            if isinstance(attrs.get(field), str):
                attrs[field] = attrs[field].strip()

        merged = {}
        if self.instance is not None:
            merged.update({field: getattr(self.instance, field) for field in
                           ("name", "short_form", "logo_url", "season", "buy_in", "playoff_spots",
                            "max_participants")})
        merged.update(attrs)
        validate_tour_data(merged)

        duplicates = Tour.objects.filter(name=merged["name"], season=merged["season"])
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise DuplicateRecordError("Tour with this name already exists in the season")
        return attrs


class TourCardSerializer(serializers.ModelSerializer):
    member = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all())
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)

    class Meta:
        model = TourCard
        fields = ("id", "display_name", "tour", "season", "member", "earnings", "points", "wins", "top_ten",
                  "top_five", "made_cut", "appearances", "playoff", "current_position", "created_date",
                  "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )
        validators = []

    def validate(self, attrs):
        merged = {"display_name": "-"}
        if self.instance is not None:
            merged.update({field: getattr(self.instance, field) for field in ("display_name",) + STAT_FIELDS})
        merged.update({key: value for key, value in attrs.items() if value not in (None, "")})
        validate_tour_card_stats(merged)
        return attrs

    def create(self, validated_data):
        request = self.context.get("request")
        return TourCard.objects.create_card(
            member=validated_data.pop("member"),
            tour=validated_data.pop("tour"),
            season=validated_data.pop("season"),
            display_name=validated_data.pop("display_name", None),
            actor=request,
            **validated_data,
        )


class TourSwitchSerializer(serializers.Serializer):
    tour = serializers.PrimaryKeyRelatedField(queryset=Tour.objects.all())
