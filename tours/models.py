from django.db import models
from django.db.models import CASCADE, PROTECT, UniqueConstraint
from simple_history.models import HistoricalRecords

from tours.managers import TourCardManager


class Tour(models.Model):
    name = models.CharField(verbose_name="Name", max_length=100)
    short_form = models.CharField(verbose_name="Short form", max_length=10)
    logo_url = models.URLField(verbose_name="Logo", max_length=500, blank=True, null=True)
    season = models.ForeignKey(verbose_name="Season", to="seasons.Season", on_delete=CASCADE, related_name="tours")
    buy_in = models.IntegerField(verbose_name="Buy-in (cents)", default=0)
    playoff_spots = models.JSONField(verbose_name="Playoff spots", default=list)
    max_participants = models.IntegerField(verbose_name="Maximum participants", blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    class Meta:
        ordering = ["season", "name"]
        constraints = [
            UniqueConstraint(fields=["name", "season"], name="unique_tour_name_season"),
        ]

    def __str__(self):
        return "{} {}".format(self.season, self.name)


class TourCard(models.Model):
    display_name = models.CharField(verbose_name="Display name", max_length=100)
    tour = models.ForeignKey(verbose_name="Tour", to=Tour, on_delete=CASCADE, related_name="tour_cards")
    season = models.ForeignKey(verbose_name="Season", to="seasons.Season", on_delete=CASCADE,
                               related_name="tour_cards")
    member = models.ForeignKey(verbose_name="Member", to="members.Member", on_delete=PROTECT,
                               related_name="tour_cards")
    earnings = models.IntegerField(verbose_name="Earnings (cents)", default=0)
    points = models.IntegerField(verbose_name="Points", default=0)
    wins = models.IntegerField(verbose_name="Wins", default=0)
    top_ten = models.IntegerField(verbose_name="Top ten", default=0)
    top_five = models.IntegerField(verbose_name="Top five", default=0)
    made_cut = models.IntegerField(verbose_name="Cuts made", default=0)
    appearances = models.IntegerField(verbose_name="Appearances", default=0)
    playoff = models.IntegerField(verbose_name="Playoff", default=0)
    current_position = models.CharField(verbose_name="Current position", max_length=10, blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    objects = TourCardManager()
    history = HistoricalRecords(excluded_fields=["updated_at"])

    class Meta:
        ordering = ["-points", "display_name"]
        constraints = [
            UniqueConstraint(fields=["member", "season"], name="unique_member_season_tour_card"),
        ]

    def __str__(self):
        return "{} ({})".format(self.display_name, self.tour.short_form)
