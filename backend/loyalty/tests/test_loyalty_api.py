"""
Loyalty API Integration Tests

Tests for the /api/loyalty/ endpoints:
- Account summary with point value
- Transaction history
- Redemption quotes
"""
import pytest

from loyalty.services import LoyaltyService

LOYALTY_URL = "/api/loyalty/"


@pytest.mark.django_db
class TestLoyaltyAPI:
    def test_requires_authentication(self, api_client):
        assert api_client.get(f"{LOYALTY_URL}account/").status_code == 401

    def test_account_created_on_first_visit(self, customer_client, restaurant_settings):
        response = customer_client.get(f"{LOYALTY_URL}account/")

        assert response.status_code == 200
        assert response.data["points"] == 0
        assert response.data["tier"] == "BRONZE"

    def test_account_points_value(self, customer_client, restaurant_settings, loyalty_account):
        response = customer_client.get(f"{LOYALTY_URL}account/")

        assert response.data["points"] == 500
        assert response.data["points_value"] == "5.00"

    def test_transactions(self, customer_client, restaurant_settings, loyalty_account, customer):
        LoyaltyService.redeem_points(customer.pk, 100)

        response = customer_client.get(f"{LOYALTY_URL}transactions/")

        assert response.status_code == 200
        assert len(response.data) == 1
        assert response.data[0]["type"] == "REDEEMED"
        assert response.data[0]["points"] == -100

    def test_redeem_preview(self, customer_client, restaurant_settings, loyalty_account):
        response = customer_client.post(f"{LOYALTY_URL}redeem/preview/", {"points": 250}, format="json")

        assert response.status_code == 200
        assert response.data == {"points": 250, "discount": "2.50"}

    def test_redeem_preview_insufficient(self, customer_client, restaurant_settings, loyalty_account):
        response = customer_client.post(f"{LOYALTY_URL}redeem/preview/", {"points": 600}, format="json")

        assert response.status_code == 400
        assert response.data == {"error": "Insufficient points"}
