"""
Loyalty Service Tests

Tests for the loyalty points ledger:
- Earning points from paid orders, once per order
- Tier promotion from lifetime points
- Redemption and point value
- Manual adjustments and expiry
- The payment_completed receiver
"""
import logging
import pytest
from decimal import Decimal
from unittest.mock import patch

from core_backend.exceptions import ValidationError
from loyalty.models import LoyaltyAccount, LoyaltyTier, LoyaltyTransaction
from loyalty.services import LoyaltyService
from loyalty.signals import award_points_for_payment
from loyalty.tiers import calculate_tier
from payments.services import PaymentService


class TestTiers:
    @pytest.mark.parametrize(
        "lifetime_points, tier",
        [
            (0, LoyaltyTier.BRONZE),
            (999, LoyaltyTier.BRONZE),
            (1000, LoyaltyTier.SILVER),
            (5000, LoyaltyTier.GOLD),
            (25000, LoyaltyTier.PLATINUM),
        ],
    )
    def test_calculate_tier(self, lifetime_points, tier):
        assert calculate_tier(lifetime_points) == tier


@pytest.mark.django_db
class TestEarnPoints:
    def test_points_per_dollar(self, restaurant_settings):
        assert LoyaltyService.calculate_points_to_earn(Decimal("22.75")) == 22

    def test_disabled_program_earns_nothing(self, restaurant_settings):
        restaurant_settings.enable_loyalty_points = False
        restaurant_settings.save()

        assert LoyaltyService.calculate_points_to_earn(Decimal("100.00")) == 0

    def test_earn_creates_account(self, restaurant_settings, customer, pickup_order):
        result = LoyaltyService.earn_points(customer.pk, Decimal("22.00"), order=pickup_order)

        assert result.success
        assert result.points == 22
        account = LoyaltyAccount.objects.get(user_id=str(customer.pk))
        assert account.points == 22
        assert account.lifetime_points == 22
        assert result.transaction.type == LoyaltyTransaction.TransactionType.EARNED

    def test_earn_once_per_order(self, restaurant_settings, loyalty_account, customer, pickup_order):
        LoyaltyService.earn_points(customer.pk, Decimal("22.00"), order=pickup_order)
        result = LoyaltyService.earn_points(customer.pk, Decimal("22.00"), order=pickup_order)

        assert not result.success
        assert result.error == "Points already earned for this order"
        loyalty_account.refresh_from_db()
        assert loyalty_account.points == 522

    def test_tier_promotion(self, restaurant_settings, loyalty_account, customer):
        LoyaltyService.earn_points(customer.pk, Decimal("600.00"))

        loyalty_account.refresh_from_db()
        assert loyalty_account.lifetime_points == 1100
        assert loyalty_account.tier == LoyaltyTier.SILVER

    def test_guest_cannot_have_account(self, restaurant_settings):
        with pytest.raises(ValidationError):
            LoyaltyService.earn_points(None, Decimal("10.00"))


@pytest.mark.django_db
class TestRedeemPoints:
    def test_points_value(self, restaurant_settings):
        assert LoyaltyService.get_points_value(250) == Decimal("2.50")

    def test_points_value_rounds_half_up(self, restaurant_settings):
        restaurant_settings.loyalty_points_for_free = 8
        restaurant_settings.save()

        assert LoyaltyService.get_points_value(1) == Decimal("0.13")
        assert LoyaltyService.get_points_value(3) == Decimal("0.38")

    def test_redeem(self, restaurant_settings, loyalty_account, customer):
        result = LoyaltyService.redeem_points(customer.pk, 200)

        assert result.success
        assert result.discount == Decimal("2.00")
        assert result.transaction.points == -200
        loyalty_account.refresh_from_db()
        assert loyalty_account.points == 300
        assert loyalty_account.lifetime_points == 500

    def test_insufficient_points(self, restaurant_settings, loyalty_account, customer):
        result = LoyaltyService.redeem_points(customer.pk, 501)

        assert not result.success
        assert result.error == "Insufficient points"
        assert not LoyaltyTransaction.objects.exists()

    @pytest.mark.parametrize("points", [0, -5, 1.5])
    def test_invalid_amount(self, restaurant_settings, loyalty_account, customer, points):
        result = LoyaltyService.redeem_points(customer.pk, points)

        assert not result.success


@pytest.mark.django_db
class TestAdjustPoints:
    def test_credit_counts_towards_lifetime(self, loyalty_account, customer):
        result = LoyaltyService.adjust_points(customer.pk, 100, description="Apology")

        assert result.success
        loyalty_account.refresh_from_db()
        assert loyalty_account.points == 600
        assert loyalty_account.lifetime_points == 600
        assert result.transaction.description == "Apology"

    def test_expiry_always_debits(self, loyalty_account, customer):
        result = LoyaltyService.adjust_points(customer.pk, 100, type=LoyaltyTransaction.TransactionType.EXPIRED)

        assert result.points == -100
        loyalty_account.refresh_from_db()
        assert loyalty_account.points == 400
        assert loyalty_account.lifetime_points == 500

    def test_cannot_go_negative(self, loyalty_account, customer):
        result = LoyaltyService.adjust_points(customer.pk, -600)

        assert not result.success
        assert result.error == "Insufficient points"

    def test_rejects_other_types(self, loyalty_account, customer):
        with pytest.raises(ValidationError):
            LoyaltyService.adjust_points(customer.pk, 10, type=LoyaltyTransaction.TransactionType.EARNED)

    def test_history_is_newest_first(self, loyalty_account, customer):
        LoyaltyService.adjust_points(customer.pk, 10)
        LoyaltyService.adjust_points(customer.pk, 20)

        history = list(LoyaltyService.get_transaction_history(customer.pk))

        assert len(history) == 2
        assert history[0].created_at >= history[1].created_at


@pytest.mark.django_db
class TestPaymentReceiver:
    def test_paid_order_earns_points(self, restaurant_settings, pickup_order, customer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            PaymentService.process_payment(pickup_order.id, pickup_order.total, "CASH")

        account = LoyaltyAccount.objects.get(user_id=str(customer.pk))
        assert account.points == 22

    def test_guest_order_earns_nothing(self, restaurant_settings, guest_order, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            PaymentService.process_payment(guest_order.id, guest_order.total, "CASH")

        assert not LoyaltyAccount.objects.exists()

    def test_failure_is_logged(self, restaurant_settings, pickup_order, caplog):
        with patch("loyalty.services.LoyaltyService.earn_points", side_effect=RuntimeError("db down")):
            with caplog.at_level(logging.ERROR, logger="loyalty.signals"):
                award_points_for_payment(sender=None, payment=None, order=pickup_order)

        assert "Failed to award loyalty points" in caplog.text
