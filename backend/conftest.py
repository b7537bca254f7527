"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import cache
from django.test import override_settings


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_app_settings():
    """
    Drop the AppSettings cache around every test.

    The singleton outlives the test transaction; without this a test that
    changes RestaurantSettings leaks its values into the next one.
    """
    from settings.config import app_settings

    app_settings.invalidate()
    yield
    app_settings.invalidate()


@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test to prevent cache pollution.
    """
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def in_memory_channel_layer():
    """
    Route push notifications and location broadcasts to the in-memory
    channel layer regardless of REDIS_URL.
    """
    with override_settings(
        CHANNEL_LAYERS={"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
    ):
        yield


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/health/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def customer_client(api_client, customer):
    """API client authenticated as a regular customer."""
    api_client.force_authenticate(user=customer)
    return api_client


@pytest.fixture
def staff_client(api_client, staff_user):
    """API client authenticated as a staff member (kitchen, dispatch)."""
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.fixture
def driver_client(api_client, driver):
    """API client authenticated as a delivery driver."""
    api_client.force_authenticate(user=driver)
    return api_client


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *  # noqa: E402,F401,F403
