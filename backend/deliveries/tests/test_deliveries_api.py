"""
Delivery API Integration Tests

Tests for the /api/deliveries/ endpoints including:
- Staff dispatch (create, assign, fail)
- Driver actions (accept, location, pickup, drop-off)
- Visibility rules for staff, drivers and customers
- Error responses from the service layer
"""
import pytest
from decimal import Decimal

from deliveries.models import Delivery
from orders.models import Order

DELIVERIES_URL = "/api/deliveries/"


def delivery_url(delivery, action=""):
    url = f"{DELIVERIES_URL}{delivery.id}/"
    return f"{url}{action}/" if action else url


@pytest.mark.django_db
class TestDispatchAPI:
    """Staff endpoints"""

    def test_staff_creates_delivery(self, staff_client, ready_delivery_order):
        response = staff_client.post(DELIVERIES_URL, {"order_id": str(ready_delivery_order.id)}, format="json")

        assert response.status_code == 201
        assert response.data["status"] == Delivery.DeliveryStatus.PENDING
        assert response.data["order_number"] == ready_delivery_order.order_number
        assert response.data["delivery_address_display"] == "1 Main St, New York, NY, 10001"
        assert response.data["navigation_url"].startswith("https://www.google.com/maps/dir/")

    def test_customer_cannot_create_delivery(self, customer_client, ready_delivery_order):
        response = customer_client.post(
            DELIVERIES_URL, {"order_id": str(ready_delivery_order.id)}, format="json"
        )

        assert response.status_code == 403

    def test_create_for_pickup_order(self, staff_client, pickup_order):
        response = staff_client.post(DELIVERIES_URL, {"order_id": str(pickup_order.id)}, format="json")

        assert response.status_code == 400
        assert response.data["error"] == "Deliveries can only be created for delivery orders"

    def test_create_for_unknown_order(self, staff_client, db):
        response = staff_client.post(
            DELIVERIES_URL, {"order_id": "00000000-0000-0000-0000-000000000000"}, format="json"
        )

        assert response.status_code == 404

    def test_latitude_without_longitude(self, staff_client, ready_delivery_order):
        response = staff_client.post(
            DELIVERIES_URL,
            {"order_id": str(ready_delivery_order.id), "latitude": "40.7"},
            format="json",
        )

        assert response.status_code == 400

    def test_assign_driver(self, staff_client, delivery, driver):
        response = staff_client.post(delivery_url(delivery, "assign"), {"driver_id": str(driver.pk)}, format="json")

        assert response.status_code == 200
        assert response.data["status"] == Delivery.DeliveryStatus.ASSIGNED
        assert response.data["driver_id"] == str(driver.pk)

    def test_assign_after_acceptance(self, staff_client, accepted_delivery, other_driver):
        response = staff_client.post(
            delivery_url(accepted_delivery, "assign"), {"driver_id": str(other_driver.pk)}, format="json"
        )

        assert response.status_code == 400
        assert "Cannot assign a driver" in response.data["error"]

    def test_driver_cannot_assign(self, driver_client, delivery, driver):
        response = driver_client.post(delivery_url(delivery, "assign"), {"driver_id": str(driver.pk)}, format="json")

        assert response.status_code == 403

    def test_staff_fails_any_delivery(self, staff_client, assigned_delivery):
        response = staff_client.post(
            delivery_url(assigned_delivery, "failed"), {"reason": "Driver unavailable"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == Delivery.DeliveryStatus.FAILED
        assert response.data["failure_reason"] == "Driver unavailable"

    def test_staff_lists_all(self, staff_client, assigned_delivery):
        response = staff_client.get(DELIVERIES_URL)

        assert response.status_code == 200
        assert [row["id"] for row in response.data] == [str(assigned_delivery.id)]

    def test_list_filter_by_status(self, staff_client, assigned_delivery):
        response = staff_client.get(DELIVERIES_URL, {"status": "PENDING"})

        assert response.status_code == 200
        assert response.data == []


@pytest.mark.django_db
class TestDriverAPI:
    """Assigned driver endpoints"""

    def test_full_run(self, driver_client, assigned_delivery):
        """Accept, pick up and drop off; the order follows along"""
        assert driver_client.post(delivery_url(assigned_delivery, "accept")).status_code == 200

        response = driver_client.post(delivery_url(assigned_delivery, "picked-up"))
        assert response.status_code == 200
        assert response.data["status"] == Delivery.DeliveryStatus.IN_TRANSIT
        assert response.data["order_status"] == Order.OrderStatus.OUT_FOR_DELIVERY

        response = driver_client.post(
            delivery_url(assigned_delivery, "delivered"), {"driver_notes": "Front desk"}, format="json"
        )
        assert response.status_code == 200
        assert response.data["status"] == Delivery.DeliveryStatus.DELIVERED
        assert response.data["driver_notes"] == "Front desk"
        assert response.data["order_status"] == Order.OrderStatus.DELIVERED

    def test_other_driver_forbidden(self, api_client, other_driver, assigned_delivery):
        api_client.force_authenticate(user=other_driver)

        response = api_client.post(delivery_url(assigned_delivery, "accept"))

        assert response.status_code == 403
        assert response.data["error"] == "Delivery not assigned to this driver"

    def test_unknown_delivery(self, driver_client, db):
        response = driver_client.post(f"{DELIVERIES_URL}00000000-0000-0000-0000-000000000000/accept/")

        assert response.status_code == 404
        assert response.data["error"] == "Delivery not found"

    def test_pickup_before_accept(self, driver_client, assigned_delivery):
        response = driver_client.post(delivery_url(assigned_delivery, "picked-up"))

        assert response.status_code == 400

    def test_location_update(self, driver_client, accepted_delivery):
        response = driver_client.post(
            delivery_url(accepted_delivery, "location"),
            {"latitude": "40.720000", "longitude": "-73.990000"},
            format="json",
        )

        assert response.status_code == 200
        assert Decimal(response.data["driver_latitude"]) == Decimal("40.720000")
        assert response.data["driver_location_updated_at"] is not None

    def test_location_out_of_range(self, driver_client, accepted_delivery):
        response = driver_client.post(
            delivery_url(accepted_delivery, "location"),
            {"latitude": "91", "longitude": "0"},
            format="json",
        )

        assert response.status_code == 400

    def test_driver_fails_own_delivery(self, driver_client, in_transit_delivery):
        response = driver_client.post(
            delivery_url(in_transit_delivery, "failed"), {"reason": "Nobody home"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == Delivery.DeliveryStatus.FAILED

    def test_fail_requires_reason(self, driver_client, in_transit_delivery):
        response = driver_client.post(delivery_url(in_transit_delivery, "failed"), {}, format="json")

        assert response.status_code == 400

    def test_driver_lists_own_deliveries(self, driver_client, assigned_delivery):
        response = driver_client.get(DELIVERIES_URL)

        assert response.status_code == 200
        assert [row["id"] for row in response.data] == [str(assigned_delivery.id)]

    def test_unauthenticated_driver_action(self, api_client, assigned_delivery):
        response = api_client.post(delivery_url(assigned_delivery, "accept"))

        assert response.status_code == 401


@pytest.mark.django_db
class TestDeliveryVisibility:
    def test_customer_tracks_own_order(self, customer_client, assigned_delivery):
        response = customer_client.get(f"{DELIVERIES_URL}order/{assigned_delivery.order_id}/")

        assert response.status_code == 200
        assert response.data["id"] == str(assigned_delivery.id)

    def test_customer_sees_no_deliveries_in_list(self, customer_client, assigned_delivery):
        response = customer_client.get(DELIVERIES_URL)

        assert response.status_code == 200
        assert response.data == []

    def test_other_customer_forbidden(self, api_client, other_customer, assigned_delivery):
        api_client.force_authenticate(user=other_customer)

        response = api_client.get(delivery_url(assigned_delivery))

        assert response.status_code == 403

    def test_assigned_driver_sees_detail(self, driver_client, assigned_delivery):
        response = driver_client.get(delivery_url(assigned_delivery))

        assert response.status_code == 200
        assert response.data["driver_id"] == str(assigned_delivery.driver_id)
