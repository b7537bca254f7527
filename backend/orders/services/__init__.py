"""
Orders services package.

- OrderService: order creation, lookup and the status state machine
- OrderCalculationService: tax, delivery fee and totals
- CheckoutService: order snapshot plus coupon, loyalty and gift card ledgers in one transaction
"""

from .order_service import ORDER_TRANSITIONS, OrderService, Transition
from .calculation_service import OrderCalculationService, OrderTotals
from .checkout_service import CheckoutService

__all__ = [
    "ORDER_TRANSITIONS",
    "OrderService",
    "Transition",
    "OrderCalculationService",
    "OrderTotals",
    "CheckoutService",
]
