"""
Error Handling Tests

Tests for the service exception taxonomy and the DRF exception handler:
- Status codes per exception type
- Response body shape ({"error": ...}, details, correlation id)
- Fallback to DRF's handler for framework exceptions
- Generic 500 for unexpected exceptions
"""
import logging
import pytest
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated
from rest_framework.test import APIRequestFactory

from core_backend.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
    service_exception_handler,
)
from core_backend.infrastructure.log_context import reset_correlation_id, set_correlation_id


def handle(exc):
    request = APIRequestFactory().get("/api/orders/")
    return service_exception_handler(exc, {"request": request})


class TestServiceExceptions:
    @pytest.mark.parametrize(
        "exc_class, expected",
        [
            (ValidationError, status.HTTP_400_BAD_REQUEST),
            (BusinessRuleViolation, status.HTTP_400_BAD_REQUEST),
            (NotFoundError, status.HTTP_404_NOT_FOUND),
            (AuthorizationError, status.HTTP_403_FORBIDDEN),
            (ExternalServiceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
        ],
    )
    def test_status_codes(self, exc_class, expected):
        response = handle(exc_class("boom"))

        assert response.status_code == expected
        assert response.data["error"] == "boom"

    def test_default_message(self):
        assert str(NotFoundError()) == "Not found"

    def test_details_are_included(self):
        response = handle(ValidationError("Bad input", details={"field": "quantity"}))

        assert response.data == {"error": "Bad input", "details": {"field": "quantity"}}

    def test_client_errors_hide_correlation_id(self):
        response = handle(NotFoundError("Order not found"))

        assert "correlation_id" not in response.data

    def test_server_errors_carry_correlation_id(self):
        token = set_correlation_id("req-123")
        try:
            response = handle(ExternalServiceError("Payment provider timed out"))
        finally:
            reset_correlation_id(token)

        assert response.data["correlation_id"] == "req-123"


class TestFallbacks:
    def test_drf_exceptions_use_default_handler(self):
        response = handle(NotAuthenticated())

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "detail" in response.data

    def test_unexpected_exception(self, caplog):
        with caplog.at_level(logging.ERROR, logger="core_backend.exceptions"):
            response = handle(KeyError("secret internals"))

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data["error"] == "An unexpected error occurred"
        assert "secret internals" not in str(response.data)
        assert "Unhandled KeyError on /api/orders/" in caplog.text
