from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from .models import GiftCard, GiftCardTransaction


class GiftCardCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    pin = serializers.CharField(max_length=8, required=False, allow_blank=True)


class GiftCardUseSerializer(GiftCardCodeSerializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    order_id = serializers.UUIDField(required=False)


class GiftCardBalanceSerializer(serializers.Serializer):
    code = serializers.CharField()
    balance = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField()
    status = serializers.CharField()
    expires_at = serializers.DateTimeField(allow_null=True)


class GiftCardTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = GiftCardTransaction
        fields = ["id", "type", "amount", "balance_after", "description", "order", "created_at"]
        read_only_fields = fields


class GiftCardSerializer(serializers.ModelSerializer):
    class Meta:
        model = GiftCard
        fields = [
            "code",
            "original_balance",
            "current_balance",
            "currency",
            "status",
            "expires_at",
            "last_used_at",
        ]
        read_only_fields = fields


class GiftCardAdminSerializer(serializers.ModelSerializer):
    """Back-office view of a card. The PIN hash never leaves the server."""

    has_pin = serializers.BooleanField(read_only=True)

    class Meta:
        model = GiftCard
        fields = [
            "id",
            "code",
            "original_balance",
            "current_balance",
            "currency",
            "status",
            "has_pin",
            "expires_at",
            "purchased_by_id",
            "recipient_email",
            "recipient_name",
            "message",
            "last_used_at",
            "created_at",
        ]
        read_only_fields = fields


class GiftCardCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    with_pin = serializers.BooleanField(required=False, default=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    purchased_by_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    recipient_email = serializers.EmailField(required=False, allow_blank=True)
    recipient_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    message = serializers.CharField(required=False, allow_blank=True)

    def validate_expires_at(self, value):
        if value and value <= timezone.now():
            raise serializers.ValidationError("Expiry must be in the future")
        return value
