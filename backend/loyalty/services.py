from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional
import logging

from django.db import transaction

from core_backend.exceptions import ValidationError
from payments.money import ZERO, quantize_decimal, to_decimal
from settings.config import app_settings

from .models import LoyaltyAccount, LoyaltyTransaction
from .tiers import calculate_tier

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


@dataclass
class LoyaltyResult:
    success: bool
    account: Optional[LoyaltyAccount] = None
    points: int = 0
    discount: Decimal = ZERO
    transaction: Optional[LoyaltyTransaction] = None
    error: Optional[str] = None


class LoyaltyService:
    """
    Loyalty points ledger. The spendable balance and the transaction row are
    always written together while the account row is locked.
    """

    @staticmethod
    def get_or_create_account(user_id) -> LoyaltyAccount:
        if not user_id:
            raise ValidationError("A user is required for loyalty points")
        account, created = LoyaltyAccount.objects.get_or_create(user_id=str(user_id))
        if created:
            logger.info(f"Loyalty account created for user {user_id}")
        return account

    @staticmethod
    def _lock_account(user_id) -> LoyaltyAccount:
        account = LoyaltyService.get_or_create_account(user_id)
        return LoyaltyAccount.objects.select_for_update().get(pk=account.pk)

    @staticmethod
    def calculate_points_to_earn(order_total) -> int:
        if not app_settings.enable_loyalty_points:
            return 0
        points = to_decimal(order_total) * to_decimal(app_settings.loyalty_points_per_dollar)
        return max(0, int(points.to_integral_value(rounding=ROUND_FLOOR)))

    @staticmethod
    def get_points_value(points: int) -> Decimal:
        """Dollar value of ``points``: loyalty_points_for_free points make one dollar."""
        per_dollar = Decimal(app_settings.loyalty_points_for_free)
        value = Decimal(points) / per_dollar
        return value.quantize(quantize_decimal(app_settings.currency), rounding=ROUND_HALF_UP)

    @staticmethod
    @transaction.atomic
    def earn_points(user_id, order_total, order=None) -> LoyaltyResult:
        points = LoyaltyService.calculate_points_to_earn(order_total)
        if points <= 0:
            return LoyaltyResult(success=False, error="No points to earn")

        account = LoyaltyService._lock_account(user_id)

        if order is not None and account.transactions.filter(
            order=order, type=LoyaltyTransaction.TransactionType.EARNED
        ).exists():
            return LoyaltyResult(success=False, account=account, error="Points already earned for this order")

        account.points += points
        account.lifetime_points += points
        account.tier = calculate_tier(account.lifetime_points)
        account.save(update_fields=["points", "lifetime_points", "tier", "updated_at"])

        entry = LoyaltyTransaction.objects.create(
            account=account,
            order=order,
            type=LoyaltyTransaction.TransactionType.EARNED,
            points=points,
            description=f"Earned {points} points from order",
        )
        logger.info(f"Loyalty {account.user_id}: earned {points} points (tier {account.tier})")
        return LoyaltyResult(success=True, account=account, points=points, transaction=entry)

    @staticmethod
    @transaction.atomic
    def redeem_points(user_id, points: int, order=None) -> LoyaltyResult:
        if not isinstance(points, int) or points <= 0:
            return LoyaltyResult(success=False, error="Points to redeem must be a positive whole number")

        account = LoyaltyService._lock_account(user_id)
        if points > account.points:
            logger.warning(f"Loyalty {account.user_id}: insufficient points ({account.points} < {points})")
            return LoyaltyResult(success=False, account=account, error="Insufficient points")

        discount = LoyaltyService.get_points_value(points)
        account.points -= points
        account.save(update_fields=["points", "updated_at"])

        entry = LoyaltyTransaction.objects.create(
            account=account,
            order=order,
            type=LoyaltyTransaction.TransactionType.REDEEMED,
            points=-points,
            description=f"Redeemed {points} points for {discount} discount",
        )
        logger.info(f"Loyalty {account.user_id}: redeemed {points} points for {discount}")
        return LoyaltyResult(
            success=True, account=account, points=points, discount=discount, transaction=entry
        )

    @staticmethod
    @transaction.atomic
    def adjust_points(user_id, points: int, type=LoyaltyTransaction.TransactionType.ADJUSTED, description="") -> LoyaltyResult:
        """
        Manual correction or expiry. ADJUSTED is applied with its sign,
        EXPIRED always debits. Only credits count towards lifetime points.
        """
        if type not in (
            LoyaltyTransaction.TransactionType.ADJUSTED,
            LoyaltyTransaction.TransactionType.EXPIRED,
        ):
            raise ValidationError(f"Cannot adjust points with type {type}")

        delta = -abs(points) if type == LoyaltyTransaction.TransactionType.EXPIRED else points
        if delta == 0:
            return LoyaltyResult(success=False, error="No points to adjust")

        account = LoyaltyService._lock_account(user_id)
        if account.points + delta < 0:
            return LoyaltyResult(success=False, account=account, error="Insufficient points")

        account.points += delta
        fields = ["points", "updated_at"]
        if delta > 0:
            account.lifetime_points += delta
            account.tier = calculate_tier(account.lifetime_points)
            fields += ["lifetime_points", "tier"]
        account.save(update_fields=fields)

        entry = LoyaltyTransaction.objects.create(
            account=account,
            type=type,
            points=delta,
            description=description or f"{type.title()} {abs(delta)} points",
        )
        logger.info(f"Loyalty {account.user_id}: {type} {delta} points")
        return LoyaltyResult(success=True, account=account, points=delta, transaction=entry)

    @staticmethod
    def get_transaction_history(user_id, limit: int = HISTORY_LIMIT):
        return LoyaltyTransaction.objects.filter(account__user_id=str(user_id)).select_related("order")[:limit]
