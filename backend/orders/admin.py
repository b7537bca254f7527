from django.contrib import admin

from .models import Order, OrderItem, OrderItemModifier


class OrderItemModifierInline(admin.TabularInline):
    model = OrderItemModifier
    extra = 0
    readonly_fields = ("modifier_set_name", "option_name", "price")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("name", "unit_price", "quantity", "line_total")
    fields = ("name", "quantity", "unit_price", "line_total", "special_instructions")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are snapshots: totals are read-only here, status changes go
    through the API so the transition table is enforced.
    """

    list_display = (
        "order_number",
        "customer_name",
        "order_type",
        "status",
        "payment_status",
        "get_total_formatted",
        "placed_at",
    )
    list_display_links = ("order_number",)
    search_fields = ("order_number", "customer_name", "customer_email", "customer_phone")
    list_filter = ("status", "payment_status", "order_type", "placed_at")
    inlines = [OrderItemInline]

    fieldsets = (
        (
            "Order Overview",
            {
                "fields": (
                    "id",
                    "order_number",
                    "order_type",
                    "status",
                    "payment_status",
                    "user_id",
                    "customer_name",
                    "customer_email",
                    "customer_phone",
                )
            },
        ),
        (
            "Financial Summary",
            {
                "fields": (
                    "subtotal",
                    "tax",
                    "delivery_fee",
                    "tip",
                    "coupon_code",
                    "coupon_discount",
                    "loyalty_points_redeemed",
                    "loyalty_discount",
                    "gift_card_code",
                    "gift_card_amount",
                    "discount",
                    "total",
                ),
            },
        ),
        (
            "Delivery",
            {
                "classes": ("collapse",),
                "fields": ("delivery_address", "delivery_instructions", "special_instructions"),
            },
        ),
        (
            "Timestamps",
            {
                "classes": ("collapse",),
                "fields": (
                    "placed_at",
                    "confirmed_at",
                    "preparing_at",
                    "ready_at",
                    "out_for_delivery_at",
                    "delivered_at",
                    "cancelled_at",
                    "cancellation_reason",
                    "updated_at",
                ),
            },
        ),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in Order._meta.fields]

    @admin.display(description="Total")
    def get_total_formatted(self, obj):
        return f"${obj.total:,.2f}"

    def has_delete_permission(self, request, obj=None):
        return False
