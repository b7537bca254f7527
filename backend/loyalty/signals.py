"""
Loyalty points are earned when an order's payment completes.
"""
import logging

from django.dispatch import receiver

from payments.signals import payment_completed

logger = logging.getLogger(__name__)


@receiver(payment_completed)
def award_points_for_payment(sender, payment, order, **kwargs):
    """
    Credit the customer's loyalty account for a paid order. Guest orders earn
    nothing. Failures are logged and never reach the payment flow.
    """
    if not order.user_id:
        return

    from .services import LoyaltyService

    try:
        result = LoyaltyService.earn_points(order.user_id, order.total, order=order)
    except Exception as e:
        logger.error(f"Failed to award loyalty points for order {order.order_number}: {e}", exc_info=True)
        return

    if result.success:
        logger.info(f"Order {order.order_number}: awarded {result.points} loyalty points")
    else:
        logger.debug(f"Order {order.order_number}: no loyalty points awarded ({result.error})")
