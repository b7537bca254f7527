from rest_framework import serializers

from .models import LoyaltyAccount, LoyaltyTransaction


class LoyaltyAccountSerializer(serializers.ModelSerializer):
    points_value = serializers.SerializerMethodField()

    class Meta:
        model = LoyaltyAccount
        fields = ["points", "lifetime_points", "tier", "points_value", "updated_at"]
        read_only_fields = fields

    def get_points_value(self, obj):
        from .services import LoyaltyService

        return str(LoyaltyService.get_points_value(obj.points))


class LoyaltyTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = LoyaltyTransaction
        fields = ["id", "type", "points", "description", "order", "created_at"]
        read_only_fields = fields


class RedeemPreviewSerializer(serializers.Serializer):
    points = serializers.IntegerField(min_value=1)
