from django.db import models
from django.db.models import CASCADE, UniqueConstraint


class Golfer(models.Model):
    api_id = models.IntegerField(verbose_name="Data feed id", unique=True)
    player_name = models.CharField(verbose_name="Player name", max_length=100)
    country = models.CharField(verbose_name="Country", max_length=60, blank=True, null=True)
    world_rank = models.IntegerField(verbose_name="World rank", blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    class Meta:
        ordering = ["player_name"]

    def __str__(self):
        return self.player_name


class TournamentGolfer(models.Model):
    golfer = models.ForeignKey(verbose_name="Golfer", to=Golfer, on_delete=CASCADE, related_name="tournaments")
    tournament = models.ForeignKey(verbose_name="Tournament", to="tournaments.Tournament", on_delete=CASCADE,
                                   related_name="golfers")
    position = models.CharField(verbose_name="Position", max_length=10, blank=True, null=True)
    pos_change = models.IntegerField(verbose_name="Position change", blank=True, null=True)
    score = models.IntegerField(verbose_name="Score to par", blank=True, null=True)
    make_cut = models.BooleanField(verbose_name="Made cut", blank=True, null=True)
    top_ten = models.BooleanField(verbose_name="Top ten", blank=True, null=True)
    win = models.BooleanField(verbose_name="Win", blank=True, null=True)
    earnings = models.IntegerField(verbose_name="Earnings (cents)", default=0)
    today = models.IntegerField(verbose_name="Today", blank=True, null=True)
    thru = models.IntegerField(verbose_name="Thru", blank=True, null=True)
    round = models.IntegerField(verbose_name="Round", blank=True, null=True)
    end_hole = models.IntegerField(verbose_name="End hole", blank=True, null=True)
    group = models.IntegerField(verbose_name="Group", blank=True, null=True)
    rating = models.FloatField(verbose_name="Rating", blank=True, null=True)
    world_rank = models.IntegerField(verbose_name="World rank", blank=True, null=True)
    usage = models.FloatField(verbose_name="Usage", blank=True, null=True)
    round_one = models.IntegerField(verbose_name="Round one", blank=True, null=True)
    round_two = models.IntegerField(verbose_name="Round two", blank=True, null=True)
    round_three = models.IntegerField(verbose_name="Round three", blank=True, null=True)
    round_four = models.IntegerField(verbose_name="Round four", blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    class Meta:
        constraints = [
            UniqueConstraint(fields=["golfer", "tournament"], name="unique_golfer_tournament"),
        ]

    def __str__(self):
        return "{} at {}".format(self.golfer, self.tournament)
