from django.contrib import admin

from .models import RestaurantSettings


@admin.register(RestaurantSettings)
class RestaurantSettingsAdmin(admin.ModelAdmin):
    list_display = ("name", "currency", "tax_rate", "delivery_fee", "min_order_amount", "updated_at")
    fieldsets = (
        ("Restaurant", {"fields": ("name", "email", "phone", "address")}),
        ("Pricing", {"fields": ("currency", "tax_rate", "delivery_fee", "min_order_amount")}),
        (
            "Loyalty",
            {"fields": ("enable_loyalty_points", "loyalty_points_per_dollar", "loyalty_points_for_free")},
        ),
        ("Notifications", {"fields": ("enable_email_notifications", "enable_sms_notifications")}),
        (
            "Operations",
            {
                "fields": (
                    "auto_accept_orders",
                    "latitude",
                    "longitude",
                    "delivery_radius_miles",
                    "average_prep_minutes",
                )
            },
        ),
    )

    def has_add_permission(self, request):
        return not RestaurantSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
