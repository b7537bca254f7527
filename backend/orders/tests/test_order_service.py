"""
Order Service Tests

Tests for order creation and the status state machine including:
- Snapshotting cart lines and frozen totals
- Validation of order type, items, modifiers and minimum order
- Legal and illegal status transitions
- Order-type specific edges (pickup vs delivery)
- Timestamps stamped on each transition
- Payment status flags
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from core_backend.exceptions import BusinessRuleViolation, NotFoundError, ValidationError
from orders.models import Order
from orders.services import ORDER_TRANSITIONS, OrderService
from orders.signals import order_status_changed

Status = Order.OrderStatus


def advance(order, *statuses):
    for status in statuses:
        OrderService.update_order_status(order, status)
    return order


@pytest.mark.django_db
class TestCreateOrder:
    """Cart snapshot and totals"""

    def test_pickup_totals(self, pickup_order):
        assert pickup_order.status == Status.PENDING
        assert pickup_order.payment_status == Order.PaymentStatus.UNPAID
        assert pickup_order.subtotal == Decimal("20.00")
        assert pickup_order.tax == Decimal("2.00")
        assert pickup_order.delivery_fee == Decimal("0.00")
        assert pickup_order.total == Decimal("22.00")

    def test_delivery_totals(self, delivery_order):
        assert delivery_order.delivery_fee == Decimal("5.00")
        assert delivery_order.total == Decimal("27.00")
        assert delivery_order.delivery_address["city"] == "New York"

    def test_order_number_format(self, pickup_order):
        prefix, timestamp, suffix = pickup_order.order_number.split("-")

        assert prefix == "ORD"
        assert timestamp.isalnum() and timestamp.isupper()
        assert len(suffix) == 4

    def test_order_numbers_are_unique(self, db):
        numbers = {OrderService.generate_order_number() for _ in range(50)}

        assert len(numbers) == 50

    def test_items_are_snapshotted(self, pickup_order, burger):
        item = pickup_order.items.get()

        burger.price = Decimal("99.00")
        burger.name = "Renamed"
        burger.save()

        item.refresh_from_db()
        assert item.name == "Classic Burger"
        assert item.unit_price == Decimal("10.00")
        assert item.line_total == Decimal("20.00")

    def test_modifiers_priced_into_line(self, restaurant_settings, burger, cheddar):
        order = OrderService.create_order(
            order_type=Order.OrderType.PICKUP,
            items=[{"menu_item_id": burger.id, "quantity": 2, "modifier_option_ids": [cheddar.id]}],
        )

        item = order.items.get()
        assert item.line_total == Decimal("23.00")
        modifier = item.modifiers.get()
        assert modifier.option_name == "Cheddar"
        assert modifier.modifier_set_name == "Add cheese"
        assert modifier.price == Decimal("1.50")

    def test_tip_is_added(self, restaurant_settings, burger):
        order = OrderService.create_order(
            order_type=Order.OrderType.PICKUP,
            items=[{"menu_item_id": burger.id}],
            tip="2.50",
        )

        assert order.tip == Decimal("2.50")
        assert order.total == Decimal("13.50")

    def test_estimated_time_uses_prep_minutes(self, pickup_order):
        minutes = (pickup_order.estimated_delivery_time - pickup_order.placed_at).total_seconds() / 60

        assert minutes == 20

    def test_invalid_order_type(self, restaurant_settings, burger):
        with pytest.raises(ValidationError, match="Invalid order type"):
            OrderService.create_order(order_type="DINE_IN", items=[{"menu_item_id": burger.id}])

    def test_delivery_requires_address(self, restaurant_settings, burger):
        with pytest.raises(ValidationError, match="Delivery address is required"):
            OrderService.create_order(order_type=Order.OrderType.DELIVERY, items=[{"menu_item_id": burger.id}])

    def test_empty_cart(self, restaurant_settings):
        with pytest.raises(ValidationError, match="at least one item"):
            OrderService.create_order(order_type=Order.OrderType.PICKUP, items=[])

    def test_zero_quantity(self, restaurant_settings, burger):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            OrderService.create_order(
                order_type=Order.OrderType.PICKUP, items=[{"menu_item_id": burger.id, "quantity": 0}]
            )

    def test_unknown_menu_item(self, restaurant_settings):
        with pytest.raises(NotFoundError):
            OrderService.create_order(order_type=Order.OrderType.PICKUP, items=[{"menu_item_id": 999999}])

    def test_unavailable_menu_item(self, restaurant_settings, burger):
        burger.is_available = False
        burger.save()

        with pytest.raises(BusinessRuleViolation, match="currently unavailable"):
            OrderService.create_order(order_type=Order.OrderType.PICKUP, items=[{"menu_item_id": burger.id}])

    def test_foreign_modifier_option(self, restaurant_settings, fries, cheddar):
        with pytest.raises(ValidationError, match="not available for Fries"):
            OrderService.create_order(
                order_type=Order.OrderType.PICKUP,
                items=[{"menu_item_id": fries.id, "modifier_option_ids": [cheddar.id]}],
            )

    def test_minimum_order(self, restaurant_settings, fries):
        restaurant_settings.min_order_amount = Decimal("15.00")
        restaurant_settings.save()

        with pytest.raises(ValidationError, match="Minimum order amount is"):
            OrderService.create_order(order_type=Order.OrderType.PICKUP, items=[{"menu_item_id": fries.id}])

        assert not Order.objects.exists()


@pytest.mark.django_db
class TestStatusTransitions:
    """The order state machine"""

    def test_pickup_happy_path(self, pickup_order):
        advance(pickup_order, Status.CONFIRMED, Status.PREPARING, Status.READY, Status.DELIVERED)

        pickup_order.refresh_from_db()
        assert pickup_order.status == Status.DELIVERED
        for field in ("confirmed_at", "preparing_at", "ready_at", "delivered_at", "actual_delivery_time"):
            assert getattr(pickup_order, field) is not None
        assert pickup_order.out_for_delivery_at is None

    def test_delivery_happy_path(self, delivery_order):
        advance(
            delivery_order,
            Status.CONFIRMED,
            Status.PREPARING,
            Status.READY,
            Status.OUT_FOR_DELIVERY,
            Status.DELIVERED,
        )

        delivery_order.refresh_from_db()
        assert delivery_order.status == Status.DELIVERED
        assert delivery_order.out_for_delivery_at is not None

    def test_pickup_cannot_go_out_for_delivery(self, pickup_order):
        advance(pickup_order, Status.CONFIRMED, Status.PREPARING, Status.READY)

        with pytest.raises(BusinessRuleViolation, match="PICKUP orders cannot transition"):
            OrderService.update_order_status(pickup_order, Status.OUT_FOR_DELIVERY)

    def test_delivery_cannot_skip_driver(self, delivery_order):
        advance(delivery_order, Status.CONFIRMED, Status.PREPARING, Status.READY)

        with pytest.raises(BusinessRuleViolation):
            OrderService.update_order_status(delivery_order, Status.DELIVERED)

    def test_cannot_skip_kitchen(self, pickup_order):
        with pytest.raises(BusinessRuleViolation, match="Cannot transition order from PENDING to READY"):
            OrderService.update_order_status(pickup_order, Status.READY)

    def test_cannot_go_backwards(self, pickup_order):
        advance(pickup_order, Status.CONFIRMED, Status.PREPARING)

        with pytest.raises(BusinessRuleViolation):
            OrderService.update_order_status(pickup_order, Status.CONFIRMED)

    def test_unknown_status(self, pickup_order):
        with pytest.raises(ValidationError, match="is not a valid order status"):
            OrderService.update_order_status(pickup_order, "EATEN")

    def test_failed_transition_changes_nothing(self, pickup_order):
        with pytest.raises(BusinessRuleViolation):
            OrderService.update_order_status(pickup_order, Status.DELIVERED)

        pickup_order.refresh_from_db()
        assert pickup_order.status == Status.PENDING
        assert pickup_order.delivered_at is None

    @pytest.mark.parametrize("steps", [
        (),
        (Status.CONFIRMED,),
        (Status.CONFIRMED, Status.PREPARING),
    ])
    def test_cancel_before_ready(self, pickup_order, steps):
        advance(pickup_order, *steps)

        OrderService.cancel_order(pickup_order, "Customer called")

        pickup_order.refresh_from_db()
        assert pickup_order.status == Status.CANCELLED
        assert pickup_order.cancellation_reason == "Customer called"
        assert pickup_order.cancelled_at is not None

    def test_cannot_cancel_ready_order(self, pickup_order):
        advance(pickup_order, Status.CONFIRMED, Status.PREPARING, Status.READY)

        with pytest.raises(BusinessRuleViolation, match="cannot be cancelled once it is READY"):
            OrderService.cancel_order(pickup_order)

    def test_cannot_cancel_twice(self, pickup_order):
        OrderService.cancel_order(pickup_order)

        with pytest.raises(BusinessRuleViolation, match="already cancelled"):
            OrderService.cancel_order(pickup_order)

    def test_terminal_states_have_no_exits(self):
        sources = {source for (source, _target) in ORDER_TRANSITIONS}

        assert Status.DELIVERED not in sources
        assert Status.CANCELLED not in sources

    def test_signal_sent_on_commit(self, pickup_order, django_capture_on_commit_callbacks):
        receiver = MagicMock()
        order_status_changed.connect(receiver)
        try:
            with django_capture_on_commit_callbacks(execute=False) as callbacks:
                OrderService.update_order_status(pickup_order, Status.CONFIRMED)
            receiver.assert_not_called()
            for callback in callbacks:
                callback()
        finally:
            order_status_changed.disconnect(receiver)

        receiver.assert_called_once()
        assert receiver.call_args.kwargs["old_status"] == Status.PENDING
        assert receiver.call_args.kwargs["new_status"] == Status.CONFIRMED


@pytest.mark.django_db
class TestPaymentStatus:
    def test_mark_as_paid_once(self, pickup_order):
        assert OrderService.mark_as_paid(pickup_order) is True
        assert OrderService.mark_as_paid(pickup_order) is False

        pickup_order.refresh_from_db()
        assert pickup_order.payment_status == Order.PaymentStatus.PAID

    def test_mark_as_refunded(self, paid_delivery_order):
        OrderService.mark_as_refunded(paid_delivery_order)

        paid_delivery_order.refresh_from_db()
        assert paid_delivery_order.payment_status == Order.PaymentStatus.REFUNDED


@pytest.mark.django_db
class TestLookup:
    def test_get_order(self, pickup_order):
        assert OrderService.get_order(pickup_order.id) == pickup_order

    def test_get_unknown_order(self, db):
        with pytest.raises(NotFoundError, match="Order not found"):
            OrderService.get_order("00000000-0000-0000-0000-000000000000")

    def test_get_by_number(self, pickup_order):
        assert OrderService.get_order_by_number(pickup_order.order_number) == pickup_order

    def test_list_orders_filters(self, pickup_order, delivery_order, guest_order, customer):
        assert set(OrderService.list_orders(user_id=customer.pk)) == {pickup_order, delivery_order}
        assert list(OrderService.list_orders(order_type=Order.OrderType.DELIVERY)) == [delivery_order]
        assert list(OrderService.list_orders(order_number=guest_order.order_number)) == [guest_order]
