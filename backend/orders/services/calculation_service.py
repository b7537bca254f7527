from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
import logging

from core_backend.exceptions import ValidationError
from payments.money import ZERO, format_money, quantize, to_decimal
from settings.config import app_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    tip: Decimal
    discount: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "delivery_fee": self.delivery_fee,
            "tip": self.tip,
            "discount": self.discount,
            "total": self.total,
        }


class OrderCalculationService:
    """Tax, delivery fee and grand total for an order snapshot."""

    @staticmethod
    def calculate_line_total(unit_price, modifier_prices: Iterable, quantity: int) -> Decimal:
        """(unit price + sum of modifier prices) x quantity"""
        unit = to_decimal(unit_price) + sum((to_decimal(p) for p in modifier_prices), ZERO)
        return quantize(app_settings.currency, unit * quantity)

    @staticmethod
    def calculate_tax(subtotal) -> Decimal:
        return quantize(app_settings.currency, to_decimal(subtotal) * to_decimal(app_settings.tax_rate))

    @staticmethod
    def get_delivery_fee(order_type: str) -> Decimal:
        from orders.models import Order

        if order_type == Order.OrderType.DELIVERY:
            return quantize(app_settings.currency, app_settings.delivery_fee)
        return ZERO

    @staticmethod
    def calculate_totals(subtotal, order_type: str, tip=ZERO, discount=ZERO) -> OrderTotals:
        """
        Tax is charged on the subtotal only. The delivery fee applies to
        DELIVERY orders. Discounts never push the total below zero.
        """
        currency = app_settings.currency
        subtotal = quantize(currency, subtotal)
        tip = quantize(currency, tip or ZERO)
        discount = quantize(currency, discount or ZERO)
        if tip < 0:
            raise ValidationError("Tip cannot be negative")
        if discount < 0:
            raise ValidationError("Discount cannot be negative")

        tax = OrderCalculationService.calculate_tax(subtotal)
        delivery_fee = OrderCalculationService.get_delivery_fee(order_type)
        total = max(ZERO, subtotal + tax + delivery_fee + tip - discount)

        return OrderTotals(
            subtotal=subtotal,
            tax=tax,
            delivery_fee=delivery_fee,
            tip=tip,
            discount=discount,
            total=quantize(currency, total),
        )

    @staticmethod
    def check_minimum_order(subtotal) -> None:
        minimum = to_decimal(app_settings.min_order_amount)
        if minimum > 0 and to_decimal(subtotal) < minimum:
            logger.warning(f"Order rejected: subtotal {subtotal} below minimum {minimum}")
            raise ValidationError(
                f"Minimum order amount is {format_money(app_settings.currency, minimum)}"
            )
