import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyTier(models.TextChoices):
    BRONZE = "BRONZE", _("Bronze")
    SILVER = "SILVER", _("Silver")
    GOLD = "GOLD", _("Gold")
    PLATINUM = "PLATINUM", _("Platinum")


class LoyaltyAccount(models.Model):
    """
    One account per user. ``tier`` is always derived from
    ``lifetime_points`` by ``loyalty.tiers.calculate_tier``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=64, unique=True)
    points = models.PositiveIntegerField(default=0, help_text=_("Spendable balance."))
    lifetime_points = models.PositiveIntegerField(default=0)
    tier = models.CharField(max_length=10, choices=LoyaltyTier.choices, default=LoyaltyTier.BRONZE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Loyalty {self.user_id}: {self.points} pts ({self.tier})"


class LoyaltyTransaction(models.Model):
    """Append-only points ledger entry."""

    class TransactionType(models.TextChoices):
        EARNED = "EARNED", _("Earned")
        REDEEMED = "REDEEMED", _("Redeemed")
        EXPIRED = "EXPIRED", _("Expired")
        ADJUSTED = "ADJUSTED", _("Adjusted")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(LoyaltyAccount, on_delete=models.PROTECT, related_name="transactions")
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_transactions",
    )
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    points = models.IntegerField(help_text=_("Signed change to the spendable balance."))
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["account", "order", "type"],
                condition=models.Q(type="EARNED", order__isnull=False),
                name="loyalty_earn_once_per_order",
            ),
        ]

    def __str__(self):
        return f"{self.type} {self.points} for {self.account.user_id}"
