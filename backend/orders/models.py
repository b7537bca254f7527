import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Order(models.Model):
    """
    Snapshot of a checkout. Prices and totals are frozen at creation; after
    that only status, payment status and their timestamps change.
    """

    class OrderStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")
        OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", _("Out for Delivery")
        DELIVERED = "DELIVERED", _("Delivered")
        CANCELLED = "CANCELLED", _("Cancelled")

    class OrderType(models.TextChoices):
        DELIVERY = "DELIVERY", _("Delivery")
        PICKUP = "PICKUP", _("Pickup")

    class PaymentStatus(models.TextChoices):
        UNPAID = "UNPAID", _("Unpaid")
        PAID = "PAID", _("Paid")
        REFUNDED = "REFUNDED", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True)
    order_type = models.CharField(max_length=10, choices=OrderType.choices)
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID
    )

    # --- Customer ---
    user_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    customer_name = models.CharField(max_length=200, blank=True)
    customer_email = models.EmailField(blank=True)
    customer_phone = models.CharField(max_length=32, blank=True)

    # --- Delivery ---
    delivery_address = models.JSONField(null=True, blank=True)
    delivery_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    delivery_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    delivery_instructions = models.TextField(blank=True)
    special_instructions = models.TextField(blank=True)

    # --- Totals (frozen at checkout) ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tip = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text=_("Sum of coupon, loyalty and gift card reductions."),
    )
    total = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    # --- Ledger breakdown ---
    coupon_code = models.CharField(max_length=50, blank=True)
    coupon_discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    loyalty_points_redeemed = models.PositiveIntegerField(default=0)
    loyalty_discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    gift_card_code = models.CharField(max_length=20, blank=True)
    gift_card_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    cancellation_reason = models.TextField(blank=True)

    # --- Status timestamps ---
    placed_at = models.DateTimeField(default=timezone.now, editable=False)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    preparing_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)
    out_for_delivery_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    estimated_delivery_time = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-placed_at"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["status", "placed_at"], name="order_status_placed_idx"),
            models.Index(fields=["user_id", "status"], name="order_user_status_idx"),
            models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.order_type}) - {self.status}"

    @property
    def is_paid(self):
        return self.payment_status == self.PaymentStatus.PAID


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        "menu.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
        help_text=_("Catalog reference; name and price are snapshotted below."),
    )
    name = models.CharField(max_length=200)
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Price of the menu item at the time of sale."),
    )
    quantity = models.PositiveIntegerField(default=1)
    special_instructions = models.TextField(blank=True)
    line_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("(unit price + modifiers) x quantity"),
    )

    class Meta:
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} of {self.name} in Order {self.order.order_number}"


class OrderItemModifier(models.Model):
    order_item = models.ForeignKey(OrderItem, on_delete=models.CASCADE, related_name="modifiers")
    modifier_option = models.ForeignKey(
        "menu.ModifierOption",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    modifier_set_name = models.CharField(max_length=100)
    option_name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self):
        return f"{self.modifier_set_name}: {self.option_name} ({self.price})"
