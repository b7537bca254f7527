import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class Delivery(models.Model):
    """
    Dispatch and tracking record for a DELIVERY order. Only the assigned
    driver moves it past ASSIGNED.
    """

    class DeliveryStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        ASSIGNED = "ASSIGNED", _("Assigned")
        ACCEPTED = "ACCEPTED", _("Accepted")
        IN_TRANSIT = "IN_TRANSIT", _("In Transit")
        DELIVERED = "DELIVERED", _("Delivered")
        FAILED = "FAILED", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(
        "orders.Order", on_delete=models.PROTECT, related_name="delivery"
    )
    driver_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=DeliveryStatus.choices,
        default=DeliveryStatus.PENDING,
    )

    pickup_address = models.JSONField(default=dict, blank=True)
    delivery_address = models.JSONField(default=dict, blank=True)
    latitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True, help_text=_("Destination latitude")
    )
    longitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True, help_text=_("Destination longitude")
    )
    distance = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Straight-line distance from the restaurant, in miles."),
    )

    # Last known driver position; overwritten on every ping.
    driver_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    driver_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    driver_location_updated_at = models.DateTimeField(null=True, blank=True)

    estimated_pickup_time = models.DateTimeField(null=True, blank=True)
    estimated_delivery_time = models.DateTimeField(null=True, blank=True)
    assigned_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    actual_pickup_time = models.DateTimeField(null=True, blank=True)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, help_text=_("Dispatch notes for the driver."))
    driver_notes = models.TextField(blank=True, help_text=_("Notes left by the driver on drop-off."))
    failure_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Delivery")
        verbose_name_plural = _("Deliveries")
        indexes = [
            models.Index(fields=["status"], name="delivery_status_idx"),
            models.Index(fields=["driver_id", "status"], name="delivery_driver_status_idx"),
        ]

    def __str__(self):
        return f"Delivery for Order {self.order.order_number} - {self.status}"

    @property
    def is_active(self):
        return self.status not in (self.DeliveryStatus.DELIVERED, self.DeliveryStatus.FAILED)
