from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)
    order_status = serializers.CharField(source="order.status", read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            "id",
            "type",
            "title",
            "message",
            "link",
            "order",
            "order_number",
            "order_status",
            "read",
            "read_at",
            "email_sent",
            "sms_sent",
            "push_sent",
            "created_at",
        ]
        read_only_fields = fields


class NotificationListParamsSerializer(serializers.Serializer):
    unread_only = serializers.BooleanField(required=False, default=False)
    limit = serializers.IntegerField(required=False, default=50, min_value=1, max_value=100)
    offset = serializers.IntegerField(required=False, default=0, min_value=0)
