"""
Customer notifications for order, delivery and payment events.

All senders fire these from ``transaction.on_commit``, so the triggering
operation has already committed; anything that goes wrong here is logged
and dropped.
"""
import logging

from django.dispatch import receiver

from deliveries.models import Delivery
from deliveries.signals import delivery_assigned, delivery_status_changed
from orders.signals import order_status_changed
from payments.signals import payment_completed, payment_failed

from .services import NotificationService

logger = logging.getLogger(__name__)


@receiver(order_status_changed)
def handle_order_status_changed(sender, order, old_status, new_status, **kwargs):
    try:
        NotificationService.notify_order_status(order, new_status)
    except Exception as e:
        logger.error(
            f"Failed to notify status change {old_status} -> {new_status} for order {order.order_number}: {e}",
            exc_info=True,
        )


@receiver(delivery_assigned)
def handle_delivery_assigned(sender, delivery, driver_id, **kwargs):
    try:
        NotificationService.notify_delivery_assigned(delivery)
    except Exception as e:
        logger.error(f"Failed to notify driver assignment for delivery {delivery.id}: {e}", exc_info=True)


@receiver(delivery_status_changed)
def handle_delivery_status_changed(sender, delivery, new_status, **kwargs):
    # Pickup and drop-off reach the customer through the order status.
    if new_status != Delivery.DeliveryStatus.FAILED:
        return

    try:
        NotificationService.notify_delivery_failed(delivery)
    except Exception as e:
        logger.error(f"Failed to notify failed delivery {delivery.id}: {e}", exc_info=True)


@receiver(payment_completed)
def handle_payment_completed(sender, payment, order, **kwargs):
    try:
        NotificationService.notify_payment(payment, success=True)
    except Exception as e:
        logger.error(f"Failed to notify payment for order {order.order_number}: {e}", exc_info=True)


@receiver(payment_failed)
def handle_payment_failed(sender, payment, order, **kwargs):
    try:
        NotificationService.notify_payment(payment, success=False)
    except Exception as e:
        logger.error(f"Failed to notify failed payment for order {order.order_number}: {e}", exc_info=True)
