from django.db import models
from django.db.models import CASCADE, UniqueConstraint


class Tier(models.Model):
    name = models.CharField(verbose_name="Name", max_length=100)
    season = models.ForeignKey(verbose_name="Season", to="seasons.Season", on_delete=CASCADE, related_name="tiers")
    payouts = models.JSONField(verbose_name="Payouts (cents)", default=list)
    points = models.JSONField(verbose_name="Points", default=list)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    class Meta:
        ordering = ["season", "name"]
        constraints = [
            UniqueConstraint(fields=["name", "season"], name="unique_tier_name_season"),
        ]

    def is_playoff(self):
        return "playoff" in self.name.lower()

    def __str__(self):
        return "{} {}".format(self.season, self.name)
