from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from functools import partial
from typing import Optional, Tuple
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    NotFoundError,
    ValidationError,
)
from orders.models import Order
from settings.config import app_settings

from .location import calculate_distance, estimate_delivery_minutes, validate_coordinates
from .models import Delivery
from .signals import delivery_assigned, delivery_status_changed

logger = logging.getLogger(__name__)

Status = Delivery.DeliveryStatus


@dataclass(frozen=True)
class DeliveryTransition:
    """Timestamp fields stamped on entry and the order status the parent order follows to."""

    stamps: Tuple[str, ...] = ()
    order_status: Optional[str] = None


# (from, to) -> DeliveryTransition. Assignment has its own rules in assign_driver.
DELIVERY_TRANSITIONS = {
    (Status.ASSIGNED, Status.ACCEPTED): DeliveryTransition(("accepted_at",)),
    (Status.ACCEPTED, Status.IN_TRANSIT): DeliveryTransition(
        ("actual_pickup_time",), order_status=Order.OrderStatus.OUT_FOR_DELIVERY
    ),
    (Status.IN_TRANSIT, Status.DELIVERED): DeliveryTransition(
        ("actual_delivery_time",), order_status=Order.OrderStatus.DELIVERED
    ),
    (Status.PENDING, Status.FAILED): DeliveryTransition(("failed_at",)),
    (Status.ASSIGNED, Status.FAILED): DeliveryTransition(("failed_at",)),
    (Status.ACCEPTED, Status.FAILED): DeliveryTransition(("failed_at",)),
    (Status.IN_TRANSIT, Status.FAILED): DeliveryTransition(("failed_at",)),
}

ASSIGNABLE_STATUSES = (Status.PENDING, Status.ASSIGNED)


def delivery_group_name(delivery_id) -> str:
    return f"delivery_{delivery_id}"


class DeliveryService:
    """
    Dispatch and driver actions for delivery orders.

    Every driver action loads the delivery first (404), then checks the
    caller is the assigned driver (403), then applies the transition
    table (400). The row is locked for the whole check-and-write so two
    concurrent actions on one delivery serialize and the second sees the
    first one's result.
    """

    @staticmethod
    @transaction.atomic
    def create_delivery(
        order: Order,
        pickup_address: Optional[dict] = None,
        delivery_address: Optional[dict] = None,
        latitude=None,
        longitude=None,
        estimated_pickup_time=None,
        estimated_delivery_time=None,
        notes: str = "",
    ) -> Delivery:
        if order.order_type != Order.OrderType.DELIVERY:
            raise ValidationError("Deliveries can only be created for delivery orders")
        if order.status == Order.OrderStatus.CANCELLED:
            raise BusinessRuleViolation("Cannot create a delivery for a cancelled order")
        if Delivery.objects.filter(order=order).exists():
            raise BusinessRuleViolation("Order already has a delivery")

        latitude = latitude if latitude is not None else order.delivery_latitude
        longitude = longitude if longitude is not None else order.delivery_longitude
        if latitude is not None and longitude is not None and not validate_coordinates(latitude, longitude):
            raise ValidationError("Invalid coordinates")

        distance = None
        if None not in (latitude, longitude, app_settings.latitude, app_settings.longitude):
            distance = calculate_distance(app_settings.latitude, app_settings.longitude, latitude, longitude)
            if distance > app_settings.delivery_radius_miles:
                logger.warning(
                    f"Order {order.order_number}: destination is {distance} mi away, "
                    f"outside the {app_settings.delivery_radius_miles} mi delivery radius"
                )

        estimated_pickup_time = estimated_pickup_time or order.estimated_delivery_time
        if estimated_delivery_time is None and estimated_pickup_time and distance is not None:
            estimated_delivery_time = estimated_pickup_time + timedelta(
                minutes=estimate_delivery_minutes(distance)
            )

        delivery = Delivery.objects.create(
            order=order,
            pickup_address=pickup_address or app_settings.restaurant_address,
            delivery_address=delivery_address or order.delivery_address or {},
            latitude=latitude,
            longitude=longitude,
            distance=distance,
            estimated_pickup_time=estimated_pickup_time,
            estimated_delivery_time=estimated_delivery_time,
            notes=notes or "",
        )
        logger.info(f"Delivery {delivery.id} created for order {order.order_number} ({distance} mi)")
        return delivery

    @staticmethod
    def get_delivery(delivery_id) -> Delivery:
        try:
            return Delivery.objects.select_related("order").get(pk=delivery_id)
        except (Delivery.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Delivery not found")

    @staticmethod
    def get_delivery_for_order(order_id) -> Delivery:
        try:
            return Delivery.objects.select_related("order").get(order_id=order_id)
        except (Delivery.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Delivery not found")

    @staticmethod
    def list_deliveries(driver_id=None, status=None, order_id=None):
        queryset = Delivery.objects.select_related("order")
        if driver_id:
            queryset = queryset.filter(driver_id=str(driver_id))
        if status:
            queryset = queryset.filter(status=status)
        if order_id:
            queryset = queryset.filter(order_id=order_id)
        return queryset.order_by("-created_at")

    @staticmethod
    def _lock(delivery_id) -> Delivery:
        try:
            return Delivery.objects.select_for_update().select_related("order").get(pk=delivery_id)
        except (Delivery.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("Delivery not found")

    @staticmethod
    def _lock_for_driver(delivery_id, driver_id) -> Delivery:
        delivery = DeliveryService._lock(delivery_id)
        if not driver_id or delivery.driver_id != str(driver_id):
            logger.warning(f"Driver {driver_id} tried to act on delivery {delivery.id} assigned to {delivery.driver_id}")
            raise AuthorizationError("Delivery not assigned to this driver")
        return delivery

    @staticmethod
    @transaction.atomic
    def assign_driver(delivery_id, driver_id) -> Delivery:
        """
        Dispatch assigns (or reassigns) a driver. Assigning the current
        driver again changes nothing; a different driver can take over
        until the delivery has been accepted.
        """
        if not driver_id:
            raise ValidationError("Driver is required")
        driver_id = str(driver_id)

        delivery = DeliveryService._lock(delivery_id)
        if delivery.status not in ASSIGNABLE_STATUSES:
            raise BusinessRuleViolation(
                f"Cannot assign a driver to a delivery that is {delivery.status}"
            )
        if delivery.order.status == Order.OrderStatus.CANCELLED:
            raise BusinessRuleViolation("Cannot assign a driver to a cancelled order")
        if delivery.driver_id == driver_id:
            return delivery

        previous_driver_id = delivery.driver_id
        old_status = delivery.status
        delivery.driver_id = driver_id
        delivery.status = Status.ASSIGNED
        delivery.assigned_at = timezone.now()
        delivery.save(update_fields=["driver_id", "status", "assigned_at", "updated_at"])

        if previous_driver_id:
            logger.info(f"Delivery {delivery.id}: reassigned from driver {previous_driver_id} to {driver_id}")
        else:
            logger.info(f"Delivery {delivery.id}: assigned to driver {driver_id}")

        transaction.on_commit(
            partial(
                delivery_assigned.send,
                sender=Delivery,
                delivery=delivery,
                driver_id=driver_id,
                previous_driver_id=previous_driver_id,
            )
        )
        if old_status != Status.ASSIGNED:
            DeliveryService._status_changed(delivery, old_status, Status.ASSIGNED)
        return delivery

    @staticmethod
    def _transition(delivery: Delivery, new_status: str, **fields) -> Delivery:
        """
        Apply one edge of the transition table to a locked delivery and
        cascade to the parent order. Repeating the current status is a no-op.
        """
        old_status = delivery.status
        if old_status == new_status:
            return delivery

        transition = DELIVERY_TRANSITIONS.get((old_status, new_status))
        if transition is None:
            raise BusinessRuleViolation(f"Cannot move delivery from {old_status} to {new_status}")

        if transition.order_status:
            from orders.services import OrderService

            order = Order.objects.select_for_update().get(pk=delivery.order_id)
            if order.status != transition.order_status:
                OrderService.update_order_status(order, transition.order_status)
            delivery.order = order

        now = timezone.now()
        delivery.status = new_status
        for field in transition.stamps:
            setattr(delivery, field, now)
        for field, value in fields.items():
            setattr(delivery, field, value)
        delivery.save(update_fields=["status", "updated_at", *transition.stamps, *fields])

        logger.info(f"Delivery {delivery.id}: Status transition {old_status} -> {new_status}")
        DeliveryService._status_changed(delivery, old_status, new_status)
        return delivery

    @staticmethod
    def _status_changed(delivery: Delivery, old_status: str, new_status: str) -> None:
        transaction.on_commit(
            partial(
                delivery_status_changed.send,
                sender=Delivery,
                delivery=delivery,
                old_status=old_status,
                new_status=new_status,
            )
        )
        transaction.on_commit(
            partial(
                DeliveryService._publish,
                delivery.id,
                {
                    "type": "delivery_status",
                    "delivery_id": str(delivery.id),
                    "order_id": str(delivery.order_id),
                    "status": new_status,
                },
            )
        )

    @staticmethod
    @transaction.atomic
    def accept_delivery(delivery_id, driver_id) -> Delivery:
        delivery = DeliveryService._lock_for_driver(delivery_id, driver_id)
        return DeliveryService._transition(delivery, Status.ACCEPTED)

    @staticmethod
    @transaction.atomic
    def mark_picked_up(delivery_id, driver_id) -> Delivery:
        """Driver collected the food; the order goes OUT_FOR_DELIVERY."""
        delivery = DeliveryService._lock_for_driver(delivery_id, driver_id)
        return DeliveryService._transition(delivery, Status.IN_TRANSIT)

    @staticmethod
    @transaction.atomic
    def mark_delivered(delivery_id, driver_id, driver_notes: str = "") -> Delivery:
        delivery = DeliveryService._lock_for_driver(delivery_id, driver_id)
        fields = {"driver_notes": driver_notes} if driver_notes else {}
        return DeliveryService._transition(delivery, Status.DELIVERED, **fields)

    @staticmethod
    @transaction.atomic
    def mark_failed(delivery_id, reason: str, driver_id=None) -> Delivery:
        """
        Give up on a delivery. Dispatch calls this without a driver id; a
        driver may only fail their own delivery. The order is left as is
        for staff to resolve.
        """
        if not reason:
            raise ValidationError("A failure reason is required")
        if driver_id is None:
            delivery = DeliveryService._lock(delivery_id)
        else:
            delivery = DeliveryService._lock_for_driver(delivery_id, driver_id)
        return DeliveryService._transition(delivery, Status.FAILED, failure_reason=reason)

    @staticmethod
    def update_driver_location(delivery_id, driver_id, latitude, longitude) -> Delivery:
        """
        Overwrite the driver's last known position (last write wins) and
        broadcast it to the delivery's tracking group.
        """
        delivery = DeliveryService.get_delivery(delivery_id)
        if not driver_id or delivery.driver_id != str(driver_id):
            raise AuthorizationError("Delivery not assigned to this driver")
        if not delivery.is_active:
            raise BusinessRuleViolation(f"Delivery is already {delivery.status}")
        if not validate_coordinates(latitude, longitude):
            raise ValidationError("Invalid coordinates")

        now = timezone.now()
        latitude = Decimal(str(latitude)).quantize(Decimal("0.000001"))
        longitude = Decimal(str(longitude)).quantize(Decimal("0.000001"))
        Delivery.objects.filter(pk=delivery.pk).update(
            driver_latitude=latitude,
            driver_longitude=longitude,
            driver_location_updated_at=now,
            updated_at=now,
        )
        delivery.driver_latitude = latitude
        delivery.driver_longitude = longitude
        delivery.driver_location_updated_at = now

        payload = {
            "type": "driver_location",
            "delivery_id": str(delivery.id),
            "latitude": str(latitude),
            "longitude": str(longitude),
            "updated_at": now.isoformat(),
        }
        if delivery.latitude is not None and delivery.longitude is not None:
            remaining = calculate_distance(latitude, longitude, delivery.latitude, delivery.longitude)
            payload["distance_remaining"] = str(remaining)
            payload["eta_minutes"] = estimate_delivery_minutes(remaining)

        DeliveryService._publish(delivery.id, payload)
        return delivery

    @staticmethod
    def _publish(delivery_id, payload: dict) -> None:
        """Best-effort broadcast to ``delivery_<id>``; tracking must never break a driver action."""
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("Channel layer not available. Cannot broadcast delivery update.")
            return

        try:
            async_to_sync(channel_layer.group_send)(delivery_group_name(delivery_id), payload)
        except Exception as e:
            logger.error(f"Failed to broadcast update for delivery {delivery_id}: {e}", exc_info=True)
