from django.contrib import admin

from core.util import linkify
from golfers.models import Golfer, TournamentGolfer


class GolferAdmin(admin.ModelAdmin):
    fields = ["api_id", "player_name", "country", "world_rank", ]
    list_display = ["player_name", "api_id", "country", "world_rank", ]
    list_filter = ("country", )
    search_fields = ("player_name", "api_id", )


class TournamentGolferAdmin(admin.ModelAdmin):
    fieldsets = (
        (None, {
            "fields": ("tournament", "golfer", "group", "rating", "world_rank", "usage", )
        }),
        ("Leaderboard", {
            "fields": ("position", "pos_change", "score", "today", "thru", "round", "end_hole", "make_cut",
                       "top_ten", "win", "earnings", )
        }),
        ("Rounds", {
            "fields": ("round_one", "round_two", "round_three", "round_four", )
        }),
    )
    list_display = ["id", linkify("golfer"), linkify("tournament"), "position", "score", "group", ]
    list_display_links = ("id", )
    list_filter = ("tournament", "group", "make_cut", )
    search_fields = ("golfer__player_name", )
    raw_id_fields = ("golfer", )


admin.site.register(Golfer, GolferAdmin)
admin.site.register(TournamentGolfer, TournamentGolferAdmin)
