from django.contrib import admin

from core.util import linkify
from teams.models import Team


class TeamAdmin(admin.ModelAdmin):
    fieldsets = (
        (None, {
            "fields": ("tournament", "tour_card", "golfer_ids", )
        }),
        ("Results", {
            "fields": ("position", "past_position", "score", "today", "thru", "round", "make_cut", "earnings",
                       "points", "top_three", "top_five", "top_ten", "win", )
        }),
        ("Rounds", {
            "fields": ("round_one", "round_two", "round_three", "round_four", "round_one_tee_time",
                       "round_two_tee_time", "round_three_tee_time", "round_four_tee_time", )
        }),
    )
    list_display = ["id", linkify("tournament"), linkify("tour_card"), "position", "score", "points", "earnings", ]
    list_display_links = ("id", )
    list_filter = ("tournament__season", "tournament", "make_cut", )
    search_fields = ("tour_card__display_name", "tournament__name", )
    raw_id_fields = ("tour_card", )


admin.site.register(Team, TeamAdmin)
