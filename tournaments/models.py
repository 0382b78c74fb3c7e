from django.db import models
from django.db.models import CASCADE, PROTECT, UniqueConstraint
from simple_history.models import HistoricalRecords

STATUS_CHOICES = (
    ("upcoming", "Upcoming"),
    ("active", "Active"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
)


class Tournament(models.Model):
    name = models.CharField(verbose_name="Name", max_length=100)
    start_date = models.DateTimeField(verbose_name="Start")
    end_date = models.DateTimeField(verbose_name="End")
    tier = models.ForeignKey(verbose_name="Tier", to="tiers.Tier", on_delete=PROTECT, related_name="tournaments")
    course = models.ForeignKey(verbose_name="Course", to="courses.Course", on_delete=PROTECT,
                               related_name="tournaments")
    season = models.ForeignKey(verbose_name="Season", to="seasons.Season", on_delete=CASCADE,
                               related_name="tournaments")
    logo_url = models.URLField(verbose_name="Logo", max_length=500, blank=True, null=True)
    api_id = models.CharField(verbose_name="Data feed id", max_length=40, blank=True, null=True)
    status = models.CharField(verbose_name="Status", max_length=10, choices=STATUS_CHOICES, default="upcoming")
    current_round = models.IntegerField(verbose_name="Current round", default=1)
    live_play = models.BooleanField(verbose_name="Live play", default=False)
    leaderboard_updated_at = models.DateTimeField(verbose_name="Leaderboard updated", blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    history = HistoricalRecords(excluded_fields=["updated_at", "leaderboard_updated_at"])

    class Meta:
        ordering = ["start_date"]
        constraints = [
            UniqueConstraint(fields=["name", "season"], name="unique_tournament_name_season"),
        ]

    def __str__(self):
        return "{} {}".format(self.season, self.name)
