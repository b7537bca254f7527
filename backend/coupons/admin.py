from django.contrib import admin

from .models import Coupon, CouponUsage


class CouponUsageInline(admin.TabularInline):
    model = CouponUsage
    extra = 0
    readonly_fields = ("order", "user_id", "discount_amount", "used_at")
    can_delete = False


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "type", "discount_value", "usage_count", "usage_limit", "status")
    list_filter = ("type", "status")
    search_fields = ("code", "name")
    readonly_fields = ("usage_count", "created_at", "updated_at")
    inlines = [CouponUsageInline]
