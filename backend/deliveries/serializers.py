from rest_framework import serializers

from .location import format_address, navigation_url
from .models import Delivery


class DeliverySerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    order_status = serializers.CharField(source="order.status", read_only=True)
    delivery_address_display = serializers.SerializerMethodField()
    navigation_url = serializers.SerializerMethodField()

    class Meta:
        model = Delivery
        fields = [
            "id",
            "order",
            "order_number",
            "order_status",
            "driver_id",
            "status",
            "pickup_address",
            "delivery_address",
            "delivery_address_display",
            "latitude",
            "longitude",
            "distance",
            "navigation_url",
            "driver_latitude",
            "driver_longitude",
            "driver_location_updated_at",
            "estimated_pickup_time",
            "estimated_delivery_time",
            "assigned_at",
            "accepted_at",
            "actual_pickup_time",
            "actual_delivery_time",
            "failed_at",
            "notes",
            "driver_notes",
            "failure_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_delivery_address_display(self, obj):
        return format_address(obj.delivery_address)

    def get_navigation_url(self, obj):
        if obj.latitude is None or obj.longitude is None:
            return None
        return navigation_url(obj.latitude, obj.longitude)


class CreateDeliverySerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    pickup_address = serializers.JSONField(required=False)
    delivery_address = serializers.JSONField(required=False)
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False)
    estimated_pickup_time = serializers.DateTimeField(required=False)
    estimated_delivery_time = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, data):
        if ("latitude" in data) != ("longitude" in data):
            raise serializers.ValidationError("latitude and longitude must be sent together.")
        return data


class AssignDriverSerializer(serializers.Serializer):
    driver_id = serializers.CharField(max_length=64)


class DriverLocationSerializer(serializers.Serializer):
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, min_value=-90, max_value=90)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, min_value=-180, max_value=180)


class MarkDeliveredSerializer(serializers.Serializer):
    driver_notes = serializers.CharField(required=False, allow_blank=True, default="")


class MarkFailedSerializer(serializers.Serializer):
    reason = serializers.CharField()
