from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class RestaurantSettings(models.Model):
    """
    Singleton holding the restaurant-wide business configuration.

    Read through ``settings.config.app_settings``; there is always exactly one
    row, keyed by ``SINGLETON_ID``.
    """

    SINGLETON_ID = "default"

    id = models.CharField(primary_key=True, max_length=32, default=SINGLETON_ID, editable=False)
    name = models.CharField(max_length=200, default="Restaurant")
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.JSONField(default=dict, blank=True)

    # === PRICING ===
    currency = models.CharField(max_length=3, default="USD")
    tax_rate = models.DecimalField(
        max_digits=6,
        decimal_places=4,
        default=Decimal("0.0825"),
        help_text=_("Sales tax rate as a fraction (0.0825 = 8.25%)."),
    )
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("3.99"))
    min_order_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Minimum subtotal required to place an order."),
    )

    # === LOYALTY ===
    enable_loyalty_points = models.BooleanField(default=True)
    loyalty_points_per_dollar = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("0.50")
    )
    loyalty_points_for_free = models.PositiveIntegerField(
        default=100,
        help_text=_("Points that are worth one dollar of discount."),
    )

    # === NOTIFICATIONS ===
    enable_email_notifications = models.BooleanField(default=True)
    enable_sms_notifications = models.BooleanField(default=False)

    # === OPERATIONS ===
    auto_accept_orders = models.BooleanField(
        default=False,
        help_text=_("Confirm orders automatically once they are paid."),
    )
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    delivery_radius_miles = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal("5.00")
    )
    average_prep_minutes = models.PositiveIntegerField(default=20)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Restaurant Settings")
        verbose_name_plural = _("Restaurant Settings")

    def __str__(self):
        return f"Settings for {self.name}"

    def save(self, *args, **kwargs):
        self.id = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _created = cls.objects.get_or_create(id=cls.SINGLETON_ID)
        return obj
