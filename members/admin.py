from django.contrib import admin, messages
from simple_history.admin import SimpleHistoryAdmin

from core.util import format_cents
from members.models import Member


class MemberAdmin(SimpleHistoryAdmin):
    fieldsets = (
        (None, {
            "fields": ("user", "email", ("first_name", "last_name"), "display_name", )
        }),
        ("League", {
            "fields": ("role", "is_active", "account", "friends", "last_login_at", )
        }),
    )
    filter_horizontal = ("friends", )
    list_display = ["email", "first_name", "last_name", "role", "is_active", "balance", "last_login_at", ]
    list_display_links = ("email", )
    list_filter = ("role", "is_active", )
    search_fields = ("email", "first_name", "last_name", "display_name", )
    ordering = ["last_name", "first_name"]
    actions = ["reconcile_account"]

    @admin.display(description="Balance", ordering="account")
    def balance(self, obj):
        return format_cents(obj.account)

    @admin.action(description="Reconcile account to ledger")
    def reconcile_account(self, request, queryset):
        from transactions.models import Transaction

        for member in queryset:
            result = Transaction.objects.reconcile(member, actor=request)
            if result["old_account"] != result["new_account"]:
                self.message_user(request, "{}: {} -> {}".format(
                    member, format_cents(result["old_account"]), format_cents(result["new_account"])),
                    messages.WARNING)
        self.message_user(request, "Reconciled {} member account(s)".format(queryset.count()), messages.SUCCESS)


admin.site.register(Member, MemberAdmin)
