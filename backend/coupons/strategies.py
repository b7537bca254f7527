from abc import ABC, abstractmethod
from decimal import Decimal

from payments.money import quantize, ZERO

from .models import Coupon


class CouponStrategy(ABC):
    """The interface for a coupon discount strategy."""

    supported = True

    @abstractmethod
    def calculate(self, coupon: Coupon, subtotal: Decimal, delivery_fee: Decimal) -> Decimal:
        pass


class PercentageCouponStrategy(CouponStrategy):
    """Takes a percentage off the subtotal, capped at max_discount_amount."""

    def calculate(self, coupon, subtotal, delivery_fee):
        discount = subtotal * coupon.discount_value / Decimal("100")
        if coupon.max_discount_amount is not None:
            discount = min(discount, coupon.max_discount_amount)
        return discount


class FixedCouponStrategy(CouponStrategy):
    """Takes a fixed amount off, never more than the subtotal."""

    def calculate(self, coupon, subtotal, delivery_fee):
        return min(coupon.discount_value, subtotal)


class FreeShippingCouponStrategy(CouponStrategy):
    def calculate(self, coupon, subtotal, delivery_fee):
        return delivery_fee


class BuyXGetYCouponStrategy(CouponStrategy):
    """
    Item-level promotions are not supported for coupons; the discount is
    always zero and callers can see that through ``supported``.
    """

    supported = False

    def calculate(self, coupon, subtotal, delivery_fee):
        return ZERO


def finalize_discount(currency: str, amount: Decimal) -> Decimal:
    return quantize(currency, max(ZERO, amount))
