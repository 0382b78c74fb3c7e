from django.db import models


class Course(models.Model):
    api_id = models.CharField(verbose_name="Data feed id", max_length=40, unique=True)
    name = models.CharField(verbose_name="Name", max_length=200)
    location = models.CharField(verbose_name="Location", max_length=200)
    par = models.IntegerField(verbose_name="Par", default=72)
    front = models.IntegerField(verbose_name="Front nine par", default=36)
    back = models.IntegerField(verbose_name="Back nine par", default=36)
    time_zone_offset = models.FloatField(verbose_name="Time zone offset (hours)", default=0)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
