import uuid
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Payment(models.Model):
    """
    One charge attempt against an order. An order can have several
    (retries, failed attempts); records are never deleted.
    """

    class PaymentStatus(models.TextChoices):
        PROCESSING = "PROCESSING", _("Processing")
        COMPLETED = "COMPLETED", _("Completed")
        FAILED = "FAILED", _("Failed")
        REFUNDED = "REFUNDED", _("Refunded")

    class PaymentMethod(models.TextChoices):
        CASH = "CASH", _("Cash")
        CARD = "CARD", _("Card")
        PAYPAL = "PAYPAL", _("PayPal")
        APPLE_PAY = "APPLE_PAY", _("Apple Pay")
        GOOGLE_PAY = "GOOGLE_PAY", _("Google Pay")
        GIFT_CARD = "GIFT_CARD", _("Gift Card")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        "orders.Order", on_delete=models.PROTECT, related_name="payments"
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PROCESSING,
        help_text=_("The current status of the payment."),
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)

    payment_intent_id = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        unique=True,
        help_text=_("Stripe Payment Intent ID"),
    )
    idempotency_key = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("Key sent to the gateway so a retried create never charges twice."),
    )
    customer_id = models.CharField(
        max_length=255, blank=True, help_text=_("Stripe Customer ID")
    )
    refund_id = models.CharField(max_length=255, blank=True, null=True)
    refunded_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("The amount of this payment that has been refunded."),
    )
    failure_reason = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        indexes = [
            models.Index(fields=["status"], name="payment_status_idx"),
            models.Index(fields=["order", "status"], name="payment_order_status_idx"),
            models.Index(fields=["created_at"], name="payment_created_at_idx"),
        ]

    def __str__(self):
        return f"Payment {self.id} for Order {self.order.order_number} - {self.status}"

    @property
    def is_card(self):
        return self.payment_method == self.PaymentMethod.CARD
