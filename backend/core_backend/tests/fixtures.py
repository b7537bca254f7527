"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like users, menu items, orders and ledger balances.
"""
import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.utils import timezone
from datetime import timedelta

from coupons.models import Coupon
from giftcards.models import GiftCard
from loyalty.models import LoyaltyAccount
from menu.models import Category, MenuItem, ModifierOption, ModifierSet
from orders.models import Order
from orders.services import OrderService
from settings.models import RestaurantSettings

User = get_user_model()


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def restaurant_settings(db):
    """
    Restaurant settings with round numbers so totals are easy to check:
    10% tax, $5.00 delivery fee, no minimum order, 100 points per dollar.
    """
    settings_obj = RestaurantSettings.load()
    settings_obj.name = "Test Kitchen"
    settings_obj.address = {"street": "10 Kitchen Rd", "city": "New York", "state": "NY", "zip_code": "10007"}
    settings_obj.tax_rate = Decimal("0.10")
    settings_obj.delivery_fee = Decimal("5.00")
    settings_obj.min_order_amount = Decimal("0.00")
    settings_obj.loyalty_points_per_dollar = Decimal("1.00")
    settings_obj.loyalty_points_for_free = 100
    settings_obj.auto_accept_orders = False
    settings_obj.latitude = Decimal("40.712800")
    settings_obj.longitude = Decimal("-74.006000")
    settings_obj.average_prep_minutes = 20
    settings_obj.save()
    return settings_obj


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def customer(db):
    """Create a regular customer account"""
    return User.objects.create_user(
        username="customer", email="customer@example.com", password="password123"
    )


@pytest.fixture
def other_customer(db):
    """Create a second customer for ownership checks"""
    return User.objects.create_user(
        username="other", email="other@example.com", password="password123"
    )


@pytest.fixture
def staff_user(db):
    """Create a staff member"""
    return User.objects.create_user(
        username="staff", email="staff@example.com", password="password123", is_staff=True
    )


@pytest.fixture
def driver(db):
    """Create a delivery driver account"""
    return User.objects.create_user(
        username="driver", email="driver@example.com", password="password123"
    )


@pytest.fixture
def other_driver(db):
    return User.objects.create_user(
        username="driver2", email="driver2@example.com", password="password123"
    )


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def category(db):
    return Category.objects.create(name="Burgers", order=1)


@pytest.fixture
def burger(category):
    """$10.00 burger with an optional cheese modifier"""
    return MenuItem.objects.create(name="Classic Burger", price=Decimal("10.00"), category=category)


@pytest.fixture
def fries(category):
    return MenuItem.objects.create(name="Fries", price=Decimal("3.50"), category=category)


@pytest.fixture
def cheese_set(burger):
    modifier_set = ModifierSet.objects.create(
        name="Add cheese",
        internal_name="burger-cheese",
        selection_type=ModifierSet.SelectionType.MULTIPLE,
        min_selections=0,
        max_selections=2,
    )
    burger.modifier_sets.add(modifier_set)
    return modifier_set


@pytest.fixture
def cheddar(cheese_set):
    return ModifierOption.objects.create(
        modifier_set=cheese_set, name="Cheddar", price_delta=Decimal("1.50")
    )


# ============================================================================
# ORDER FIXTURES
# ============================================================================

DELIVERY_ADDRESS = {
    "street": "1 Main St",
    "city": "New York",
    "state": "NY",
    "zip_code": "10001",
}


@pytest.fixture
def delivery_address():
    return dict(DELIVERY_ADDRESS)


@pytest.fixture
def pickup_order(restaurant_settings, burger, customer):
    """
    PICKUP order for two burgers: subtotal 20.00, tax 2.00, total 22.00.
    """
    return OrderService.create_order(
        order_type=Order.OrderType.PICKUP,
        items=[{"menu_item_id": burger.id, "quantity": 2}],
        user_id=customer.pk,
        customer_name="Casey Customer",
        customer_email="customer@example.com",
        customer_phone="+15555550100",
    )


@pytest.fixture
def delivery_order(restaurant_settings, burger, customer, delivery_address):
    """
    DELIVERY order for two burgers: subtotal 20.00, tax 2.00, fee 5.00, total 27.00.
    """
    return OrderService.create_order(
        order_type=Order.OrderType.DELIVERY,
        items=[{"menu_item_id": burger.id, "quantity": 2}],
        user_id=customer.pk,
        customer_name="Casey Customer",
        customer_email="customer@example.com",
        customer_phone="+15555550100",
        delivery_address=delivery_address,
        delivery_latitude=Decimal("40.730600"),
        delivery_longitude=Decimal("-73.935200"),
    )


@pytest.fixture
def guest_order(restaurant_settings, burger):
    """PICKUP order placed without an account"""
    return OrderService.create_order(
        order_type=Order.OrderType.PICKUP,
        items=[{"menu_item_id": burger.id, "quantity": 1}],
        customer_name="Guest",
        customer_email="guest@example.com",
    )


@pytest.fixture
def paid_delivery_order(delivery_order):
    Order.objects.filter(pk=delivery_order.pk).update(payment_status=Order.PaymentStatus.PAID)
    delivery_order.refresh_from_db()
    return delivery_order


@pytest.fixture
def ready_delivery_order(paid_delivery_order):
    """Paid DELIVERY order the kitchen has finished (status READY)"""
    for status in (
        Order.OrderStatus.CONFIRMED,
        Order.OrderStatus.PREPARING,
        Order.OrderStatus.READY,
    ):
        OrderService.update_order_status(paid_delivery_order, status)
    return paid_delivery_order


# ============================================================================
# DELIVERY FIXTURES
# ============================================================================

@pytest.fixture
def delivery(ready_delivery_order):
    """Unassigned delivery for a READY order"""
    from deliveries.services import DeliveryService

    return DeliveryService.create_delivery(ready_delivery_order)


@pytest.fixture
def assigned_delivery(delivery, driver):
    from deliveries.services import DeliveryService

    return DeliveryService.assign_driver(delivery.id, driver.pk)


@pytest.fixture
def accepted_delivery(assigned_delivery, driver):
    from deliveries.services import DeliveryService

    return DeliveryService.accept_delivery(assigned_delivery.id, driver.pk)


@pytest.fixture
def in_transit_delivery(accepted_delivery, driver):
    from deliveries.services import DeliveryService

    return DeliveryService.mark_picked_up(accepted_delivery.id, driver.pk)


# ============================================================================
# LEDGER FIXTURES
# ============================================================================

@pytest.fixture
def percentage_coupon(db):
    """10% off, no limits"""
    return Coupon.objects.create(
        code="SAVE10",
        name="Ten percent off",
        type=Coupon.CouponType.PERCENTAGE,
        discount_value=Decimal("10.00"),
    )


@pytest.fixture
def fixed_coupon(db):
    """$5.00 off orders of $15.00 or more"""
    return Coupon.objects.create(
        code="FIVEOFF",
        name="Five dollars off",
        type=Coupon.CouponType.FIXED,
        discount_value=Decimal("5.00"),
        min_order_amount=Decimal("15.00"),
    )


@pytest.fixture
def expired_coupon(db):
    return Coupon.objects.create(
        code="OLD",
        name="Expired",
        type=Coupon.CouponType.FIXED,
        discount_value=Decimal("5.00"),
        valid_from=timezone.now() - timedelta(days=30),
        valid_until=timezone.now() - timedelta(days=1),
    )


@pytest.fixture
def gift_card(db):
    """Active $50.00 gift card without a PIN"""
    return GiftCard.objects.create(
        code="GIFT-0001",
        original_balance=Decimal("50.00"),
        current_balance=Decimal("50.00"),
    )


@pytest.fixture
def small_gift_card(db):
    """Active $10.00 gift card protected by PIN 1234"""
    return GiftCard.objects.create(
        code="GIFT-0002",
        pin=make_password("1234"),
        original_balance=Decimal("10.00"),
        current_balance=Decimal("10.00"),
    )


@pytest.fixture
def loyalty_account(customer):
    """Customer with 500 spendable points"""
    return LoyaltyAccount.objects.create(
        user_id=str(customer.pk), points=500, lifetime_points=500
    )


# ============================================================================
# GATEWAY FIXTURES
# ============================================================================

def stripe_intent(intent_id="pi_test_123", status="succeeded", amount=2200, **extra):
    """A Stripe PaymentIntent payload as the SDK returns it"""
    intent = {
        "id": intent_id,
        "status": status,
        "amount": amount,
        "currency": "usd",
        "client_secret": f"{intent_id}_secret",
        "last_payment_error": None,
        "metadata": {},
    }
    intent.update(extra)
    return intent


@pytest.fixture
def mock_gateway():
    """
    Replace the Stripe gateway used by the card strategy with a mock.

    Usage:
        def test_card(mock_gateway):
            mock_gateway.create_payment_intent.return_value = GatewayIntent(...)
    """
    gateway = MagicMock()
    with patch("payments.strategies.StripeGateway", return_value=gateway):
        yield gateway
