import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class GiftCard(models.Model):
    """
    A stored-value card. ``current_balance`` only changes together with a
    GiftCardTransaction row written in the same transaction.
    """

    class GiftCardStatus(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        USED = "USED", _("Fully Used")
        EXPIRED = "EXPIRED", _("Expired")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(
        max_length=20,
        unique=True,
        help_text=_("Unique gift card code"),
    )
    pin = models.CharField(
        max_length=128,
        blank=True,
        help_text=_("Hashed PIN. Blank when the card has no PIN."),
    )
    original_balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Original balance when the gift card was created"),
    )
    current_balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Current remaining balance on the gift card"),
    )
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=20,
        choices=GiftCardStatus.choices,
        default=GiftCardStatus.ACTIVE,
    )
    expires_at = models.DateTimeField(
        blank=True,
        null=True,
        help_text=_("Optional expiry date for the gift card"),
    )
    purchased_by_id = models.CharField(max_length=64, blank=True, null=True)
    recipient_email = models.EmailField(blank=True)
    recipient_name = models.CharField(max_length=200, blank=True)
    message = models.TextField(blank=True)
    last_used_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Gift Card")
        verbose_name_plural = _("Gift Cards")
        indexes = [
            models.Index(fields=["status", "expires_at"], name="giftcards_g_status_3e1d7c_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_balance__gte=0)
                & models.Q(current_balance__lte=models.F("original_balance")),
                name="giftcard_balance_within_bounds",
            ),
        ]

    def __str__(self):
        return f"Gift Card {self.code} - {self.current_balance} ({self.status})"

    @property
    def has_pin(self):
        return bool(self.pin)


class GiftCardTransaction(models.Model):
    """Append-only ledger entry. Usage is negative, refunds are positive."""

    class TransactionType(models.TextChoices):
        USAGE = "USAGE", _("Usage")
        REFUND = "REFUND", _("Refund")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    gift_card = models.ForeignKey(GiftCard, on_delete=models.PROTECT, related_name="transactions")
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="gift_card_transactions",
    )
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.type} {self.amount} on {self.gift_card.code}"
