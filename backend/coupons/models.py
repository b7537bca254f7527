import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Coupon(models.Model):
    class CouponType(models.TextChoices):
        PERCENTAGE = "PERCENTAGE", _("Percentage")
        FIXED = "FIXED", _("Fixed Amount")
        FREE_SHIPPING = "FREE_SHIPPING", _("Free Delivery")
        BUY_X_GET_Y = "BUY_X_GET_Y", _("Buy X Get Y")

    class CouponStatus(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        INACTIVE = "INACTIVE", _("Inactive")
        EXPIRED = "EXPIRED", _("Expired")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(
        max_length=50,
        unique=True,
        help_text=_("Customer-facing code, stored uppercased."),
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=CouponType.choices)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text=_("Percentage (0-100) or fixed amount depending on type."),
    )
    max_discount_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Upper bound for percentage discounts."),
    )
    min_order_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("The minimum subtotal required for the coupon to apply."),
    )
    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField(null=True, blank=True)
    usage_limit = models.PositiveIntegerField(
        null=True, blank=True, help_text=_("Total redemptions allowed (blank for unlimited).")
    )
    usage_limit_per_user = models.PositiveIntegerField(null=True, blank=True)
    usage_count = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=10, choices=CouponStatus.choices, default=CouponStatus.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "valid_until"], name="coupons_cou_status_5b0f1e_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(usage_limit__isnull=True)
                | models.Q(usage_count__lte=models.F("usage_limit")),
                name="coupon_usage_within_limit",
            ),
        ]

    def __str__(self):
        return f"{self.code} ({self.get_type_display()})"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)


class CouponUsage(models.Model):
    """Append-only record of a coupon redemption."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coupon = models.ForeignKey(Coupon, on_delete=models.PROTECT, related_name="usages")
    order = models.ForeignKey(
        "orders.Order", on_delete=models.PROTECT, related_name="coupon_usages"
    )
    user_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)
    used_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-used_at"]
        indexes = [
            models.Index(fields=["coupon", "user_id"], name="coupons_cou_coupon__8c2d4a_idx"),
        ]

    def __str__(self):
        return f"{self.coupon.code} used on {self.order_id}"
