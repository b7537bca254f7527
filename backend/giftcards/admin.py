from django.contrib import admin

from .models import GiftCard, GiftCardTransaction


class GiftCardTransactionInline(admin.TabularInline):
    model = GiftCardTransaction
    extra = 0
    can_delete = False
    readonly_fields = ("type", "amount", "balance_after", "order", "description", "created_at")


@admin.register(GiftCard)
class GiftCardAdmin(admin.ModelAdmin):
    list_display = ("code", "original_balance", "current_balance", "status", "expires_at", "last_used_at")
    list_filter = ("status",)
    search_fields = ("code", "recipient_email")
    readonly_fields = ("pin", "current_balance", "last_used_at", "created_at", "updated_at")
    inlines = [GiftCardTransactionInline]
