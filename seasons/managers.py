from django.db import models


class SeasonManager(models.Manager):

    def current_season(self):
        try:
            return self.latest("year", "number")
        except self.model.DoesNotExist:
            return None

    def current_for_year(self, year):
        return self.filter(year=year).order_by("-number").first()
