from django.contrib import admin

from courses.models import Course
from courses.utils import difficulty_category, format_time_zone


class CourseAdmin(admin.ModelAdmin):
    fields = ["api_id", "name", "location", "par", "front", "back", "time_zone_offset", ]
    list_display = ["name", "location", "par", "difficulty", "time_zone", "api_id", ]
    search_fields = ("name", "location", "api_id", )
    save_on_top = True

    @admin.display(description="Difficulty")
    def difficulty(self, obj):
        return difficulty_category(obj.par)

    @admin.display(description="Time zone")
    def time_zone(self, obj):
        return format_time_zone(obj.time_zone_offset)


admin.site.register(Course, CourseAdmin)
