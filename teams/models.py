from django.db import models
from django.db.models import PROTECT, UniqueConstraint

from teams.managers import TeamManager


class Team(models.Model):
    tournament = models.ForeignKey(verbose_name="Tournament", to="tournaments.Tournament", on_delete=PROTECT,
                                   related_name="teams")
    tour_card = models.ForeignKey(verbose_name="Tour card", to="tours.TourCard", on_delete=PROTECT,
                                  related_name="teams")
    golfer_ids = models.JSONField(verbose_name="Golfer api ids", default=list)
    earnings = models.IntegerField(verbose_name="Earnings (cents)", default=0)
    points = models.IntegerField(verbose_name="Points", default=0)
    make_cut = models.BooleanField(verbose_name="Made cut", blank=True, null=True)
    position = models.CharField(verbose_name="Position", max_length=10, blank=True, null=True)
    past_position = models.CharField(verbose_name="Past position", max_length=10, blank=True, null=True)
    score = models.FloatField(verbose_name="Score", blank=True, null=True)
    top_ten = models.BooleanField(verbose_name="Top ten", blank=True, null=True)
    top_five = models.BooleanField(verbose_name="Top five", blank=True, null=True)
    top_three = models.BooleanField(verbose_name="Top three", blank=True, null=True)
    win = models.BooleanField(verbose_name="Win", blank=True, null=True)
    today = models.FloatField(verbose_name="Today", blank=True, null=True)
    thru = models.FloatField(verbose_name="Thru", blank=True, null=True)
    round = models.IntegerField(verbose_name="Round", blank=True, null=True)
    round_one = models.FloatField(verbose_name="Round one", blank=True, null=True)
    round_two = models.FloatField(verbose_name="Round two", blank=True, null=True)
    round_three = models.FloatField(verbose_name="Round three", blank=True, null=True)
    round_four = models.FloatField(verbose_name="Round four", blank=True, null=True)
    round_one_tee_time = models.CharField(verbose_name="Round one tee time", max_length=30, blank=True, null=True)
    round_two_tee_time = models.CharField(verbose_name="Round two tee time", max_length=30, blank=True, null=True)
    round_three_tee_time = models.CharField(verbose_name="Round three tee time", max_length=30, blank=True,
                                            null=True)
    round_four_tee_time = models.CharField(verbose_name="Round four tee time", max_length=30, blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    objects = TeamManager()

    class Meta:
        constraints = [
            UniqueConstraint(fields=["tournament", "tour_card"], name="unique_tournament_tour_card"),
        ]

    def __str__(self):
        return "{} - {}".format(self.tournament.name, self.tour_card.display_name)
