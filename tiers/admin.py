from django.contrib import admin

from tiers.models import Tier
from tiers.utils import total_payouts, total_points


class TierAdmin(admin.ModelAdmin):
    fields = ["season", "name", "payouts", "points", ]
    list_display = ["name", "season", "levels", "payout_total", "points_total", ]
    list_filter = ("season", )
    search_fields = ("name", )

    @admin.display(description="Levels")
    def levels(self, obj):
        return len(obj.payouts or [])

    @admin.display(description="Total payouts")
    def payout_total(self, obj):
        return total_payouts(obj)

    @admin.display(description="Total points")
    def points_total(self, obj):
        return total_points(obj)


admin.site.register(Tier, TierAdmin)
