from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from core.util import linkify
from tournaments.models import Tournament


class TournamentAdmin(SimpleHistoryAdmin):
    fieldsets = (
        (None, {
            "fields": ("season", "tier", "course", "name", "api_id", "logo_url", )
        }),
        ("Schedule", {
            "fields": ("start_date", "end_date", "status", )
        }),
        ("Live Play", {
            "fields": ("current_round", "live_play", "leaderboard_updated_at", )
        }),
    )
    list_display = ["name", "start_date", "status", linkify("tier"), linkify("course"), "current_round",
                    "live_play", ]
    list_filter = ("season", "tier", "status", "live_play", )
    search_fields = ("name", "api_id", )
    date_hierarchy = "start_date"
    save_on_top = True


admin.site.register(Tournament, TournamentAdmin)
