from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user_id", "type", "title", "read", "email_sent", "push_sent", "created_at")
    list_filter = ("type", "read", "email_sent", "sms_sent", "push_sent")
    search_fields = ("user_id", "title", "order__order_number")
    readonly_fields = ("email_sent_at", "sms_sent_at", "push_sent_at", "read_at", "created_at")
