from decimal import Decimal

from rest_framework import serializers

from .models import Coupon


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "name",
            "description",
            "type",
            "discount_value",
            "max_discount_amount",
            "min_order_amount",
            "valid_from",
            "valid_until",
            "status",
        ]
        read_only_fields = fields


class CouponValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    subtotal = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False, default=Decimal("0.00")
    )
    delivery_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False, default=Decimal("0.00")
    )


class CouponAdminSerializer(serializers.ModelSerializer):
    """Back-office view of a coupon, including usage counters."""

    class Meta:
        model = Coupon
        fields = CouponSerializer.Meta.fields + [
            "usage_limit",
            "usage_limit_per_user",
            "usage_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CouponWriteSerializer(serializers.Serializer):
    """
    Fields staff may set on a coupon. ``code`` and ``type`` are fixed once
    the coupon exists, so updates reject them.
    """

    code = serializers.CharField(max_length=50)
    type = serializers.ChoiceField(choices=Coupon.CouponType.choices)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    discount_value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    max_discount_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False, allow_null=True
    )
    min_order_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False, allow_null=True
    )
    valid_from = serializers.DateTimeField(required=False)
    valid_until = serializers.DateTimeField(required=False, allow_null=True)
    usage_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    usage_limit_per_user = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Coupon.CouponStatus.choices, required=False)

    def validate(self, attrs):
        if self.partial:
            fixed = {"code", "type"} & set(self.initial_data)
            if fixed:
                raise serializers.ValidationError(
                    {name: "Cannot be changed after creation" for name in sorted(fixed)}
                )
        valid_from = attrs.get("valid_from", getattr(self.instance, "valid_from", None))
        valid_until = attrs.get("valid_until", getattr(self.instance, "valid_until", None))
        if valid_from and valid_until and valid_until <= valid_from:
            raise serializers.ValidationError({"valid_until": "Must be after valid_from"})
        return attrs
