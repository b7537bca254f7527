from rest_framework import serializers

from .models import RestaurantSettings


class RestaurantSettingsSerializer(serializers.ModelSerializer):
    """
    Public view of the restaurant settings. Contact and pricing fields are
    exposed so clients can preview totals before checkout.
    """

    class Meta:
        model = RestaurantSettings
        fields = [
            "name",
            "email",
            "phone",
            "address",
            "currency",
            "tax_rate",
            "delivery_fee",
            "min_order_amount",
            "enable_loyalty_points",
            "loyalty_points_per_dollar",
            "loyalty_points_for_free",
            "enable_email_notifications",
            "enable_sms_notifications",
            "auto_accept_orders",
            "latitude",
            "longitude",
            "delivery_radius_miles",
            "average_prep_minutes",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def validate_tax_rate(self, value):
        if value < 0 or value >= 1:
            raise serializers.ValidationError("Tax rate must be a fraction between 0 and 1.")
        return value

    def validate_loyalty_points_for_free(self, value):
        if value <= 0:
            raise serializers.ValidationError("Points for free must be greater than zero.")
        return value
