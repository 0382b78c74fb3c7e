from django.contrib import admin

from core.models import AuditLog
from core.util import linkify


class AuditLogAdmin(admin.ModelAdmin):
    fields = ["member", "entity_type", "entity_id", "action", "changes", "metadata", "ip_address", "user_agent", ]
    readonly_fields = ["member", "entity_type", "entity_id", "action", "changes", "metadata", "ip_address",
                       "user_agent", ]
    list_display = ["created_date", "entity_type", "entity_id", "action", linkify("member"), ]
    list_filter = ("entity_type", "action", )
    search_fields = ("entity_id", "member__email", "member__last_name", )
    date_hierarchy = "created_date"

    def has_add_permission(self, request):
        return False


admin.site.register(AuditLog, AuditLogAdmin)
