from decimal import Decimal

from rest_framework import serializers

from .models import Order, OrderItem, OrderItemModifier


class OrderItemModifierSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemModifier
        fields = ["modifier_option", "modifier_set_name", "option_name", "price"]


class OrderItemSerializer(serializers.ModelSerializer):
    modifiers = OrderItemModifierSerializer(many=True, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "name",
            "unit_price",
            "quantity",
            "special_instructions",
            "line_total",
            "modifiers",
        ]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "status",
            "payment_status",
            "user_id",
            "customer_name",
            "customer_email",
            "customer_phone",
            "delivery_address",
            "delivery_latitude",
            "delivery_longitude",
            "delivery_instructions",
            "special_instructions",
            "subtotal",
            "tax",
            "delivery_fee",
            "tip",
            "discount",
            "total",
            "coupon_code",
            "coupon_discount",
            "loyalty_points_redeemed",
            "loyalty_discount",
            "gift_card_code",
            "gift_card_amount",
            "cancellation_reason",
            "placed_at",
            "confirmed_at",
            "preparing_at",
            "ready_at",
            "out_for_delivery_at",
            "delivered_at",
            "actual_delivery_time",
            "cancelled_at",
            "estimated_delivery_time",
            "items",
        ]
        read_only_fields = fields


class CartItemSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    modifier_option_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, default=list
    )
    special_instructions = serializers.CharField(required=False, allow_blank=True, default="")


class DeliveryAddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100, required=False, default="US")


class CheckoutSerializer(serializers.Serializer):
    """
    Input for POST /api/orders/. Prices are never accepted from the client;
    only catalog ids, quantities and the codes to apply.
    """

    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    items = CartItemSerializer(many=True, allow_empty=False)
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    customer_email = serializers.EmailField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    delivery_address = DeliveryAddressSerializer(required=False, allow_null=True, default=None)
    delivery_latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True, default=None)
    delivery_longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True, default=None)
    delivery_instructions = serializers.CharField(required=False, allow_blank=True, default="")
    special_instructions = serializers.CharField(required=False, allow_blank=True, default="")
    tip = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False, default=Decimal("0.00")
    )
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    loyalty_points = serializers.IntegerField(min_value=0, required=False, default=0)
    gift_card_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    gift_card_pin = serializers.CharField(max_length=10, required=False, allow_blank=True, default="")

    def validate(self, data):
        if data["order_type"] == Order.OrderType.DELIVERY and not data.get("delivery_address"):
            raise serializers.ValidationError(
                {"delivery_address": "Delivery address is required for delivery orders"}
            )
        return data


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Serializer for a status change request. The target is checked against
    the transition table by OrderService, not here, so an unknown value
    surfaces the service's error message.
    """

    status = serializers.CharField(max_length=20)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
