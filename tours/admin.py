from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from core.util import format_cents, linkify
from tours.models import Tour, TourCard


class TourAdmin(admin.ModelAdmin):
    fields = ["season", "name", "short_form", "logo_url", "buy_in", "playoff_spots", "max_participants", ]
    list_display = ["name", "short_form", "season", "buy_in_display", "max_participants", ]
    list_filter = ("season", )
    search_fields = ("name", "short_form", )

    @admin.display(description="Buy-in")
    def buy_in_display(self, obj):
        return format_cents(obj.buy_in)


class TourCardAdmin(SimpleHistoryAdmin):
    fieldsets = (
        (None, {
            "fields": ("season", "tour", "member", "display_name", )
        }),
        ("Standings", {
            "fields": ("points", "earnings", "current_position", "wins", "top_five", "top_ten", "made_cut",
                       "appearances", "playoff", )
        }),
    )
    list_display = ["display_name", linkify("member"), "tour", "season", "points", "earnings",
                    "current_position", ]
    list_filter = ("season", "tour", "playoff", )
    search_fields = ("display_name", "member__first_name", "member__last_name", "member__email", )
    raw_id_fields = ("member", )


admin.site.register(Tour, TourAdmin)
admin.site.register(TourCard, TourCardAdmin)
