from django.contrib import admin

from .models import LoyaltyAccount, LoyaltyTransaction


class LoyaltyTransactionInline(admin.TabularInline):
    model = LoyaltyTransaction
    extra = 0
    can_delete = False
    readonly_fields = ("type", "points", "description", "order", "created_at")


@admin.register(LoyaltyAccount)
class LoyaltyAccountAdmin(admin.ModelAdmin):
    list_display = ("user_id", "points", "lifetime_points", "tier", "updated_at")
    list_filter = ("tier",)
    search_fields = ("user_id",)
    readonly_fields = ("points", "lifetime_points", "tier")
    inlines = [LoyaltyTransactionInline]
