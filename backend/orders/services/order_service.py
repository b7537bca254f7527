from dataclasses import dataclass
from datetime import timedelta
from functools import partial
from typing import Optional, Sequence, Tuple
import logging
import secrets
import string
import time

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from menu.services import CatalogService
from payments.money import ZERO, to_decimal
from settings.config import app_settings

from orders.models import Order, OrderItem, OrderItemModifier
from orders.signals import order_created, order_status_changed

from .calculation_service import OrderCalculationService

logger = logging.getLogger(__name__)

Status = Order.OrderStatus
OrderType = Order.OrderType

BASE36 = string.digits + string.ascii_uppercase
LIST_LIMIT = 100


@dataclass(frozen=True)
class Transition:
    """Timestamp fields stamped on entry and the order types allowed to take the edge."""

    stamps: Tuple[str, ...] = ()
    order_types: Optional[Tuple[str, ...]] = None

    def allows(self, order_type: str) -> bool:
        return self.order_types is None or order_type in self.order_types


# (from, to) -> Transition. Anything not listed is illegal.
ORDER_TRANSITIONS = {
    (Status.PENDING, Status.CONFIRMED): Transition(("confirmed_at",)),
    (Status.PENDING, Status.CANCELLED): Transition(("cancelled_at",)),
    (Status.CONFIRMED, Status.PREPARING): Transition(("preparing_at",)),
    (Status.CONFIRMED, Status.CANCELLED): Transition(("cancelled_at",)),
    (Status.PREPARING, Status.READY): Transition(("ready_at",)),
    (Status.PREPARING, Status.CANCELLED): Transition(("cancelled_at",)),
    (Status.READY, Status.OUT_FOR_DELIVERY): Transition(
        ("out_for_delivery_at",), order_types=(OrderType.DELIVERY,)
    ),
    (Status.READY, Status.DELIVERED): Transition(
        ("delivered_at", "actual_delivery_time"), order_types=(OrderType.PICKUP,)
    ),
    (Status.OUT_FOR_DELIVERY, Status.DELIVERED): Transition(
        ("delivered_at", "actual_delivery_time"), order_types=(OrderType.DELIVERY,)
    ),
}

CANCELLABLE_STATUSES = frozenset(
    source for (source, target) in ORDER_TRANSITIONS if target == Status.CANCELLED
)


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36[remainder])
    return "".join(reversed(digits)) or "0"


class OrderService:
    """Core service for order lifecycle management - creating, reading and moving orders through their statuses."""

    @staticmethod
    def generate_order_number() -> str:
        """ORD-<base36 millisecond timestamp>-<4 random base36 characters>"""
        timestamp = _to_base36(int(time.time() * 1000))
        suffix = "".join(secrets.choice(BASE36) for _ in range(4))
        return f"ORD-{timestamp}-{suffix}"

    @staticmethod
    def _snapshot_items(items: Sequence[dict]) -> list:
        """
        Resolve cart lines against the catalog. Returns a list of
        ``(menu_item, options, quantity, special_instructions, line_total)``.
        """
        if not items:
            raise ValidationError("Order must contain at least one item")

        lines = []
        for entry in items:
            try:
                quantity = int(entry.get("quantity", 1))
            except (TypeError, ValueError):
                raise ValidationError("Quantity must be a whole number")
            if quantity < 1:
                raise ValidationError("Quantity must be at least 1")

            menu_item = CatalogService.get_menu_item(entry.get("menu_item_id"))
            options = CatalogService.get_modifier_options(
                menu_item, entry.get("modifier_option_ids") or []
            )
            line_total = OrderCalculationService.calculate_line_total(
                menu_item.price, [option.price_delta for option in options], quantity
            )
            lines.append(
                (menu_item, options, quantity, entry.get("special_instructions", ""), line_total)
            )
        return lines

    @staticmethod
    @transaction.atomic
    def create_order(
        order_type: str,
        items: Sequence[dict],
        user_id=None,
        customer_name: str = "",
        customer_email: str = "",
        customer_phone: str = "",
        delivery_address: Optional[dict] = None,
        delivery_latitude=None,
        delivery_longitude=None,
        delivery_instructions: str = "",
        special_instructions: str = "",
        tip=ZERO,
    ) -> Order:
        """
        Snapshot the cart into a new PENDING order. Prices always come from
        the catalog; totals are frozen here and never recomputed from the
        catalog again.

        Raises:
            ValidationError: malformed input or subtotal below the minimum order amount
            NotFoundError: a referenced menu item does not exist
            BusinessRuleViolation: a menu item or option is unavailable
        """
        if order_type not in OrderType.values:
            raise ValidationError(f"Invalid order type: {order_type}")
        if order_type == OrderType.DELIVERY and not delivery_address:
            raise ValidationError("Delivery address is required for delivery orders")

        lines = OrderService._snapshot_items(items)
        subtotal = sum((line[4] for line in lines), ZERO)
        OrderCalculationService.check_minimum_order(subtotal)
        totals = OrderCalculationService.calculate_totals(subtotal, order_type, tip=to_decimal(tip or ZERO))

        now = timezone.now()
        order = Order.objects.create(
            order_number=OrderService.generate_order_number(),
            order_type=order_type,
            user_id=str(user_id) if user_id else None,
            customer_name=customer_name or "",
            customer_email=customer_email or "",
            customer_phone=customer_phone or "",
            delivery_address=delivery_address if order_type == OrderType.DELIVERY else None,
            delivery_latitude=delivery_latitude,
            delivery_longitude=delivery_longitude,
            delivery_instructions=delivery_instructions or "",
            special_instructions=special_instructions or "",
            placed_at=now,
            estimated_delivery_time=now + timedelta(minutes=app_settings.average_prep_minutes),
            **totals.as_dict(),
        )

        for menu_item, options, quantity, instructions, line_total in lines:
            order_item = OrderItem.objects.create(
                order=order,
                menu_item=menu_item,
                name=menu_item.name,
                unit_price=menu_item.price,
                quantity=quantity,
                special_instructions=instructions or "",
                line_total=line_total,
            )
            OrderItemModifier.objects.bulk_create(
                [
                    OrderItemModifier(
                        order_item=order_item,
                        modifier_option=option,
                        modifier_set_name=option.modifier_set.name,
                        option_name=option.name,
                        price=option.price_delta,
                    )
                    for option in options
                ]
            )

        logger.info(
            f"Order {order.order_number} created ({order.order_type}, "
            f"{len(lines)} lines, total {order.total})"
        )
        transaction.on_commit(partial(order_created.send, sender=Order, order=order))
        return order

    @staticmethod
    def get_order(order_id) -> Order:
        try:
            return Order.objects.prefetch_related("items__modifiers").get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Order not found")

    @staticmethod
    def get_order_by_number(order_number: str) -> Order:
        try:
            return Order.objects.prefetch_related("items__modifiers").get(order_number=order_number)
        except Order.DoesNotExist:
            raise NotFoundError("Order not found")

    @staticmethod
    def list_orders(user_id=None, status=None, order_type=None, order_number=None, limit: int = LIST_LIMIT):
        queryset = Order.objects.prefetch_related("items__modifiers")
        if user_id:
            queryset = queryset.filter(user_id=str(user_id))
        if status:
            queryset = queryset.filter(status=status)
        if order_type:
            queryset = queryset.filter(order_type=order_type)
        if order_number:
            queryset = queryset.filter(order_number=order_number)
        return queryset.order_by("-placed_at")[:limit]

    @staticmethod
    def _get_transition(order: Order, new_status: str) -> Transition:
        old_status = order.status
        transition = ORDER_TRANSITIONS.get((old_status, new_status))

        if transition is None:
            if new_status == Status.CANCELLED:
                if old_status == Status.CANCELLED:
                    raise BusinessRuleViolation("Order is already cancelled")
                raise BusinessRuleViolation(f"Order cannot be cancelled once it is {old_status}")
            raise BusinessRuleViolation(f"Cannot transition order from {old_status} to {new_status}")

        if not transition.allows(order.order_type):
            raise BusinessRuleViolation(
                f"{order.order_type} orders cannot transition from {old_status} to {new_status}"
            )
        return transition

    @staticmethod
    @transaction.atomic
    def update_order_status(order: Order, new_status: str, reason: Optional[str] = None) -> Order:
        """
        Move an order along the status table, stamping the timestamps of the
        edge. The order row is locked so concurrent transitions serialize.

        Raises:
            ValidationError: ``new_status`` is not a known status
            BusinessRuleViolation: the edge is not in the transition table
        """
        # Unknown targets are rejected outright (400) rather than stored without a timestamp.
        if new_status not in Status.values:
            raise ValidationError(f"'{new_status}' is not a valid order status.")

        locked = Order.objects.select_for_update().get(pk=order.pk)
        old_status = locked.status
        transition = OrderService._get_transition(locked, new_status)

        now = timezone.now()
        locked.status = new_status
        for field in transition.stamps:
            setattr(locked, field, now)
        fields = ["status", "updated_at", *transition.stamps]
        if new_status == Status.CANCELLED:
            locked.cancellation_reason = reason or ""
            fields.append("cancellation_reason")
        locked.save(update_fields=fields)

        logger.info(f"Order {locked.order_number}: Status transition {old_status} -> {new_status}")
        transaction.on_commit(
            partial(
                order_status_changed.send,
                sender=Order,
                order=locked,
                old_status=old_status,
                new_status=new_status,
            )
        )

        # Keep the caller's instance in step with the database.
        for field in fields:
            setattr(order, field, getattr(locked, field))
        return order

    @staticmethod
    def cancel_order(order: Order, reason: str = "") -> Order:
        return OrderService.update_order_status(order, Status.CANCELLED, reason=reason)

    @staticmethod
    def mark_as_paid(order: Order) -> bool:
        """
        Flip payment status to PAID. Must run inside the caller's
        transaction so the payment record and the order move together.
        Returns False when the order was already paid.
        """
        updated = Order.objects.filter(pk=order.pk).exclude(
            payment_status=Order.PaymentStatus.PAID
        ).update(payment_status=Order.PaymentStatus.PAID, updated_at=timezone.now())
        order.payment_status = Order.PaymentStatus.PAID
        if updated:
            logger.info(f"Order {order.order_number}: payment status -> PAID")
        return bool(updated)

    @staticmethod
    def mark_as_refunded(order: Order) -> None:
        Order.objects.filter(pk=order.pk).update(
            payment_status=Order.PaymentStatus.REFUNDED, updated_at=timezone.now()
        )
        order.payment_status = Order.PaymentStatus.REFUNDED
        logger.info(f"Order {order.order_number}: payment status -> REFUNDED")
