from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging
import secrets

from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import NotFoundError, ValidationError
from payments.money import ZERO, quantize, to_decimal
from settings.config import app_settings

from .models import GiftCard, GiftCardTransaction

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 12
CODE_GROUP = 4
PIN_LENGTH = 4


@dataclass
class GiftCardValidation:
    valid: bool
    gift_card: Optional[GiftCard] = None
    balance: Decimal = ZERO
    error: Optional[str] = None


@dataclass
class GiftCardOperation:
    success: bool
    gift_card: Optional[GiftCard] = None
    amount: Decimal = ZERO
    remaining_balance: Decimal = ZERO
    transaction: Optional[GiftCardTransaction] = None
    error: Optional[str] = None


def normalize_code(code) -> str:
    return (code or "").strip().upper()


class GiftCardService:
    """
    Gift card ledger. Every balance change writes a GiftCardTransaction in the
    same database transaction, with the card row locked.
    """

    @staticmethod
    def generate_code() -> str:
        """12 characters without look-alike symbols, grouped as XXXX-XXXX-XXXX."""
        raw = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
        return "-".join(raw[i:i + CODE_GROUP] for i in range(0, CODE_LENGTH, CODE_GROUP))

    @staticmethod
    def generate_pin() -> str:
        return "".join(secrets.choice("0123456789") for _ in range(PIN_LENGTH))

    @staticmethod
    def create_gift_card(
        amount,
        with_pin: bool = True,
        expires_at: Optional[datetime] = None,
        purchased_by_id=None,
        recipient_email: str = "",
        recipient_name: str = "",
        message: str = "",
    ):
        """
        Issue a new card. Returns ``(gift_card, pin)``; the plain PIN is only
        available here, the card stores its hash.
        """
        currency = app_settings.currency
        amount = quantize(currency, amount)
        if amount <= 0:
            raise ValidationError("Gift card amount must be greater than zero")

        code = GiftCardService.generate_code()
        while GiftCard.objects.filter(code=code).exists():
            code = GiftCardService.generate_code()

        pin = GiftCardService.generate_pin() if with_pin else None
        gift_card = GiftCard.objects.create(
            code=code,
            pin=make_password(pin) if pin else "",
            original_balance=amount,
            current_balance=amount,
            currency=currency,
            expires_at=expires_at,
            purchased_by_id=str(purchased_by_id) if purchased_by_id else None,
            recipient_email=recipient_email,
            recipient_name=recipient_name,
            message=message,
        )
        logger.info(f"Gift card {gift_card.code} issued for {amount}")
        return gift_card, pin

    @staticmethod
    def get_gift_card(gift_card_id) -> GiftCard:
        try:
            return GiftCard.objects.get(pk=gift_card_id)
        except (GiftCard.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Gift card not found")

    @staticmethod
    def list_gift_cards(status: Optional[str] = None):
        gift_cards = GiftCard.objects.all()
        if status:
            gift_cards = gift_cards.filter(status=status)
        return gift_cards

    @staticmethod
    def get_by_code(code: str) -> GiftCard:
        try:
            return GiftCard.objects.get(code=normalize_code(code))
        except GiftCard.DoesNotExist:
            raise NotFoundError("Gift card not found")

    @staticmethod
    def _check_card(gift_card: GiftCard, pin=None, check_pin=True) -> Optional[str]:
        """
        Eligibility checks shared by validate and use. Returns an error
        message, or None when the card can be spent.
        """
        if gift_card.status != GiftCard.GiftCardStatus.ACTIVE:
            return "Gift card is not active"

        now = timezone.now()
        if gift_card.expires_at and now > gift_card.expires_at:
            flipped = GiftCard.objects.filter(
                pk=gift_card.pk, status=GiftCard.GiftCardStatus.ACTIVE
            ).update(status=GiftCard.GiftCardStatus.EXPIRED, updated_at=now)
            if flipped:
                logger.info(f"Gift card {gift_card.code} expired")
            gift_card.status = GiftCard.GiftCardStatus.EXPIRED
            return "Gift card has expired"

        if gift_card.current_balance <= 0:
            return "Gift card has no balance"

        if check_pin and gift_card.has_pin:
            if not pin:
                return "PIN required"
            if not check_password(str(pin), gift_card.pin):
                return "Invalid PIN"

        return None

    @staticmethod
    def validate_gift_card(code: str, pin=None) -> GiftCardValidation:
        try:
            gift_card = GiftCard.objects.get(code=normalize_code(code))
        except GiftCard.DoesNotExist:
            return GiftCardValidation(valid=False, error="Gift card not found")

        error = GiftCardService._check_card(gift_card, pin=pin)
        if error:
            return GiftCardValidation(valid=False, gift_card=gift_card, error=error)

        return GiftCardValidation(valid=True, gift_card=gift_card, balance=gift_card.current_balance)

    @staticmethod
    @transaction.atomic
    def use_gift_card(code: str, amount, order=None, pin=None, check_pin=True) -> GiftCardOperation:
        """
        Deduct ``amount`` from the card. Spending more than the balance is an
        error, never a partial charge.
        """
        amount = to_decimal(amount)
        if amount <= 0:
            return GiftCardOperation(success=False, error="Amount must be greater than zero")

        try:
            gift_card = GiftCard.objects.select_for_update().get(code=normalize_code(code))
        except GiftCard.DoesNotExist:
            return GiftCardOperation(success=False, error="Gift card not found")

        error = GiftCardService._check_card(gift_card, pin=pin, check_pin=check_pin)
        if error:
            return GiftCardOperation(success=False, gift_card=gift_card, error=error)

        amount = quantize(gift_card.currency, amount)
        if amount > gift_card.current_balance:
            logger.warning(
                f"Gift card {gift_card.code}: insufficient balance "
                f"({gift_card.current_balance} < {amount})"
            )
            return GiftCardOperation(
                success=False,
                gift_card=gift_card,
                remaining_balance=gift_card.current_balance,
                error="Insufficient balance",
            )

        now = timezone.now()
        gift_card.current_balance -= amount
        gift_card.last_used_at = now
        if gift_card.current_balance == 0:
            gift_card.status = GiftCard.GiftCardStatus.USED
        gift_card.save(update_fields=["current_balance", "status", "last_used_at", "updated_at"])

        entry = GiftCardTransaction.objects.create(
            gift_card=gift_card,
            order=order,
            type=GiftCardTransaction.TransactionType.USAGE,
            amount=-amount,
            balance_after=gift_card.current_balance,
            description=f"Used on order {order.order_number}" if order else "Gift card usage",
        )
        logger.info(f"Gift card {gift_card.code}: used {amount}, balance {gift_card.current_balance}")

        return GiftCardOperation(
            success=True,
            gift_card=gift_card,
            amount=amount,
            remaining_balance=gift_card.current_balance,
            transaction=entry,
        )

    @staticmethod
    @transaction.atomic
    def refund_gift_card(code: str, amount, order=None) -> GiftCardOperation:
        """
        Put ``amount`` back on the card, never above the original balance.
        A fully used card becomes ACTIVE again only once the whole original
        balance is restored.
        """
        amount = to_decimal(amount)
        if amount <= 0:
            return GiftCardOperation(success=False, error="Amount must be greater than zero")

        try:
            gift_card = GiftCard.objects.select_for_update().get(code=normalize_code(code))
        except GiftCard.DoesNotExist:
            return GiftCardOperation(success=False, error="Gift card not found")

        refundable = gift_card.original_balance - gift_card.current_balance
        amount = min(quantize(gift_card.currency, amount), refundable)
        if amount <= 0:
            return GiftCardOperation(
                success=False,
                gift_card=gift_card,
                remaining_balance=gift_card.current_balance,
                error="Gift card balance is already full",
            )

        gift_card.current_balance += amount
        if (
            gift_card.status == GiftCard.GiftCardStatus.USED
            and gift_card.current_balance >= gift_card.original_balance
        ):
            gift_card.status = GiftCard.GiftCardStatus.ACTIVE
        gift_card.save(update_fields=["current_balance", "status", "updated_at"])

        entry = GiftCardTransaction.objects.create(
            gift_card=gift_card,
            order=order,
            type=GiftCardTransaction.TransactionType.REFUND,
            amount=amount,
            balance_after=gift_card.current_balance,
            description=f"Refund for order {order.order_number}" if order else "Gift card refund",
        )
        logger.info(f"Gift card {gift_card.code}: refunded {amount}, balance {gift_card.current_balance}")

        return GiftCardOperation(
            success=True,
            gift_card=gift_card,
            amount=amount,
            remaining_balance=gift_card.current_balance,
            transaction=entry,
        )

    @staticmethod
    def check_balance(code: str) -> dict:
        gift_card = GiftCardService.get_by_code(code)
        return {
            "code": gift_card.code,
            "balance": gift_card.current_balance,
            "currency": gift_card.currency,
            "status": gift_card.status,
            "expires_at": gift_card.expires_at,
        }

    @staticmethod
    def get_transactions(gift_card: GiftCard):
        return gift_card.transactions.select_related("order").all()
