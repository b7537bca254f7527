from django.contrib import admin

from .models import Delivery


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "order",
        "driver_id",
        "status",
        "distance",
        "estimated_delivery_time",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("id", "order__order_number", "driver_id")
    readonly_fields = (
        "driver_latitude",
        "driver_longitude",
        "driver_location_updated_at",
        "assigned_at",
        "accepted_at",
        "actual_pickup_time",
        "actual_delivery_time",
        "failed_at",
        "created_at",
        "updated_at",
    )
