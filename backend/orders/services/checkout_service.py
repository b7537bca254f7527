from typing import Optional, Sequence
import logging

from django.db import transaction

from core_backend.exceptions import BusinessRuleViolation, ValidationError
from coupons.services import CouponService
from giftcards.services import GiftCardService
from loyalty.services import LoyaltyService
from payments.money import ZERO, quantize
from settings.config import app_settings

from orders.models import Order

from .calculation_service import OrderCalculationService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns a cart into an order and applies the ledgers in a fixed order:
    coupon, then loyalty points, then gift card. Every ledger commit happens
    inside the same transaction as the order, so a failure at any step
    leaves no order and no spent balance behind.
    """

    @staticmethod
    @transaction.atomic
    def checkout(
        order_type: str,
        items: Sequence[dict],
        user_id=None,
        coupon_code: Optional[str] = None,
        loyalty_points: int = 0,
        gift_card_code: Optional[str] = None,
        gift_card_pin: Optional[str] = None,
        tip=ZERO,
        **order_fields,
    ) -> Order:
        order = OrderService.create_order(
            order_type=order_type, items=items, user_id=user_id, tip=tip, **order_fields
        )
        currency = app_settings.currency
        coupon_discount = ZERO
        loyalty_discount = ZERO
        gift_card_amount = ZERO

        def remaining():
            return OrderCalculationService.calculate_totals(
                order.subtotal,
                order.order_type,
                tip=order.tip,
                discount=coupon_discount + loyalty_discount + gift_card_amount,
            ).total

        if coupon_code:
            coupon_discount = CheckoutService._apply_coupon(order, coupon_code, user_id, remaining())

        if loyalty_points:
            loyalty_discount = CheckoutService._redeem_points(order, user_id, loyalty_points, remaining())

        if gift_card_code:
            gift_card_amount = CheckoutService._apply_gift_card(
                order, gift_card_code, gift_card_pin, remaining()
            )

        totals = OrderCalculationService.calculate_totals(
            order.subtotal,
            order.order_type,
            tip=order.tip,
            discount=quantize(currency, coupon_discount + loyalty_discount + gift_card_amount),
        )
        order.discount = totals.discount
        order.total = totals.total
        order.coupon_discount = coupon_discount
        order.loyalty_discount = loyalty_discount
        order.gift_card_amount = gift_card_amount
        order.save(
            update_fields=[
                "discount",
                "total",
                "coupon_code",
                "coupon_discount",
                "loyalty_points_redeemed",
                "loyalty_discount",
                "gift_card_code",
                "gift_card_amount",
                "updated_at",
            ]
        )

        if order.total == ZERO and gift_card_amount > 0:
            # Covered entirely by the gift card; settle it without a gateway call.
            from payments.services import PaymentService

            PaymentService.record_gift_card_payment(order, gift_card_amount)

        logger.info(
            f"Checkout {order.order_number}: coupon {coupon_discount}, loyalty {loyalty_discount}, "
            f"gift card {gift_card_amount}, total {order.total}"
        )
        return order

    @staticmethod
    def _apply_coupon(order: Order, code: str, user_id, remaining):
        application = CouponService.apply_coupon(
            code, user_id=user_id, subtotal=order.subtotal, delivery_fee=order.delivery_fee
        )
        if not application.success:
            raise BusinessRuleViolation(application.error)
        if not application.supported:
            raise BusinessRuleViolation(
                f"Coupon type {application.coupon.type} is not supported yet"
            )

        discount = min(application.discount, remaining)
        usage = CouponService.record_usage(
            application.coupon, order, user_id=user_id, discount_amount=discount
        )
        if not usage.success:
            raise BusinessRuleViolation(usage.error)

        order.coupon_code = application.coupon.code
        return discount

    @staticmethod
    def _redeem_points(order: Order, user_id, points, remaining):
        if not user_id:
            raise ValidationError("You must be signed in to redeem loyalty points")
        if not isinstance(points, int) or points <= 0:
            raise ValidationError("Points to redeem must be a positive whole number")

        value = LoyaltyService.get_points_value(points)
        if value > remaining:
            raise BusinessRuleViolation("Points value exceeds the order total")

        result = LoyaltyService.redeem_points(user_id, points, order=order)
        if not result.success:
            raise BusinessRuleViolation(result.error)

        order.loyalty_points_redeemed = points
        return result.discount

    @staticmethod
    def _apply_gift_card(order: Order, code: str, pin, remaining):
        validation = GiftCardService.validate_gift_card(code, pin=pin)
        if not validation.valid:
            raise BusinessRuleViolation(validation.error)

        amount = min(validation.balance, remaining)
        if amount <= 0:
            return ZERO

        operation = GiftCardService.use_gift_card(code, amount, order=order, pin=pin)
        if not operation.success:
            raise BusinessRuleViolation(operation.error)

        order.gift_card_code = operation.gift_card.code
        return operation.amount
