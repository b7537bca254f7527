import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """
    A message shown in the customer's inbox. The ``*_sent`` flags record
    which transports actually delivered it.
    """

    class NotificationType(models.TextChoices):
        ORDER_CONFIRMED = "ORDER_CONFIRMED", _("Order Confirmed")
        ORDER_STATUS = "ORDER_STATUS", _("Order Status")
        DELIVERY_ASSIGNED = "DELIVERY_ASSIGNED", _("Delivery Assigned")
        DELIVERY_PICKED_UP = "DELIVERY_PICKED_UP", _("Delivery Picked Up")
        DELIVERY_DELIVERED = "DELIVERY_DELIVERED", _("Delivery Delivered")
        DELIVERY_FAILED = "DELIVERY_FAILED", _("Delivery Failed")
        PAYMENT_RECEIVED = "PAYMENT_RECEIVED", _("Payment Received")
        PAYMENT_FAILED = "PAYMENT_FAILED", _("Payment Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64, db_index=True)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    type = models.CharField(max_length=30, choices=NotificationType.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True)

    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    email_sent = models.BooleanField(default=False)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    sms_sent = models.BooleanField(default=False)
    sms_sent_at = models.DateTimeField(null=True, blank=True)
    push_sent = models.BooleanField(default=False)
    push_sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Notification")
        verbose_name_plural = _("Notifications")
        indexes = [
            models.Index(fields=["user_id", "read"], name="notification_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.type} for user {self.user_id}: {self.title}"
