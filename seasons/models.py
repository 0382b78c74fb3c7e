from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import UniqueConstraint

from seasons.managers import SeasonManager


class Season(models.Model):
    year = models.IntegerField(verbose_name="Year")
    number = models.IntegerField(verbose_name="Season number", default=1)
    start_date = models.DateTimeField(verbose_name="Start date", null=True, blank=True)
    end_date = models.DateTimeField(verbose_name="End date", null=True, blank=True)
    registration_deadline = models.DateTimeField(verbose_name="Registration deadline", null=True, blank=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    objects = SeasonManager()

    class Meta:
        ordering = ["-year", "-number"]
        constraints = [
            UniqueConstraint(fields=["year", "number"], name="unique_season_year_number"),
        ]

    def clean(self):
        from seasons.utils import season_errors

        errors = season_errors(self.year, self.number, self.start_date, self.end_date, self.registration_deadline)
        if errors:
            raise ValidationError(errors)

    def __str__(self):
        if self.number == 1:
            return str(self.year)
        return "{} (#{})".format(self.year, self.number)
