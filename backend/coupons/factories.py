from .models import Coupon
from .strategies import (
    CouponStrategy,
    PercentageCouponStrategy,
    FixedCouponStrategy,
    FreeShippingCouponStrategy,
    BuyXGetYCouponStrategy,
)


class CouponStrategyFactory:
    """
    Factory for creating a coupon strategy based on the coupon type.
    """

    _strategies = {
        Coupon.CouponType.PERCENTAGE: PercentageCouponStrategy,
        Coupon.CouponType.FIXED: FixedCouponStrategy,
        Coupon.CouponType.FREE_SHIPPING: FreeShippingCouponStrategy,
        Coupon.CouponType.BUY_X_GET_Y: BuyXGetYCouponStrategy,
    }

    @staticmethod
    def get_strategy(coupon: Coupon) -> CouponStrategy:
        strategy_class = CouponStrategyFactory._strategies.get(coupon.type)

        if strategy_class:
            return strategy_class()

        raise NotImplementedError(f"No strategy implemented for coupon type '{coupon.type}'")
