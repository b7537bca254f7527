from decimal import Decimal

from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order",
            "order_number",
            "amount",
            "currency",
            "status",
            "payment_method",
            "payment_intent_id",
            "refund_id",
            "refunded_amount",
            "failure_reason",
            "processed_at",
            "created_at",
        ]
        read_only_fields = fields


class ProcessPaymentSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    # Clients may send sub-cent float noise; reconciliation applies the tolerance.
    amount = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal("0.00"))
    # Free-form so that an unknown method reaches the factory and is
    # rejected there with the same message the service layer uses.
    payment_method = serializers.CharField(max_length=20)
    payment_method_id = serializers.CharField(max_length=255, required=False, allow_blank=True)
    customer_email = serializers.EmailField(required=False, allow_blank=True)


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=255)
    payment_method_id = serializers.CharField(max_length=255, required=False, allow_blank=True)


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0.01")
    )
