from rest_framework import serializers

from core.exceptions import DuplicateRecordError
from .models import Tier
from .utils import validate_tier_data


class TierSerializer(serializers.ModelSerializer):

    class Meta:
        model = Tier
        fields = ("id", "name", "season", "payouts", "points", "created_date", "updated_at", )
        read_only_fields = ("id", "created_date", "updated_at", )
        # duplicate names are reported by validate() with a domain error
        validators = []

    def validate(self, attrs):
        merged = {}
        if self.instance is not None:
            merged.update({"name": self.instance.name, "payouts": self.instance.payouts,
                           "points": self.instance.points, "season": self.instance.season})
        merged.update(attrs)
        if "name" in merged and merged["name"] is not None:
            merged["name"] = merged["name"].strip()
            if "name" in attrs:
                attrs["name"] = merged["name"]
        validate_tier_data(merged)

        duplicates = Tier.objects.filter(name=merged["name"], season=merged["season"])
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise DuplicateRecordError("Tier with this name already exists in the season")

        return attrs
