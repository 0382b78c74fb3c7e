from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from core.util import format_cents, linkify
from transactions.models import Transaction


class TransactionAdmin(SimpleHistoryAdmin):
    fieldsets = (
        (None, {
            "fields": ("member", "season", "transaction_type", "status", )
        }),
        ("Amount", {
            "fields": ("amount", "payout_email", "processed_at", )
        }),
    )
    list_display = ["id", linkify("member"), "season", "transaction_type", "status", "amount_display",
                    "processed_at", ]
    list_display_links = ("id", )
    list_filter = ("transaction_type", "status", "season", )
    search_fields = ("member__first_name", "member__last_name", "member__email", "payout_email", )
    raw_id_fields = ("member", )
    readonly_fields = ("processed_at", )

    @admin.display(description="Amount", ordering="amount")
    def amount_display(self, obj):
        return format_cents(obj.amount)

    def save_model(self, request, obj, form, change):
        if change:
            changes = {field: form.cleaned_data[field] for field in form.changed_data
                       if field in ("member", "season", "amount", "transaction_type", "status", "payout_email")}
            Transaction.objects.update_transaction(Transaction.objects.get(pk=obj.pk), actor=request, **changes)
        else:
            created = Transaction.objects.create_transaction(obj.member, obj.season, obj.amount, obj.transaction_type,
                                                             status=obj.status, payout_email=obj.payout_email,
                                                             actor=request)
            obj.pk = created.pk

    def delete_model(self, request, obj):
        Transaction.objects.delete_transaction(obj, actor=request)

    def has_delete_permission(self, request, obj=None):
        # bulk deletes would bypass the ledger
        return obj is not None and super().has_delete_permission(request, obj)


admin.site.register(Transaction, TransactionAdmin)
