from django.contrib import admin

from seasons.models import Season


class SeasonAdmin(admin.ModelAdmin):
    fields = ["year", "number", "start_date", "end_date", "registration_deadline", ]
    list_display = ["year", "number", "start_date", "end_date", "registration_deadline", ]
    ordering = ["-year", "-number"]


admin.site.register(Season, SeasonAdmin)
