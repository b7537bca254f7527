"""
Request Middleware Tests

Tests for request-level infrastructure:
- Correlation ids generated, propagated and echoed back
- Correlation ids attached to log records
- Health check endpoint
"""
import logging

from core_backend.infrastructure.log_context import CorrelationIdFilter, get_correlation_id


class TestCorrelationId:
    def test_generated_when_missing(self, client):
        response = client.get("/api/health/")

        assert response.status_code == 200
        assert len(response["X-Request-ID"]) == 32

    def test_incoming_id_is_echoed(self, client):
        response = client.get("/api/health/", HTTP_X_REQUEST_ID="edge-42")

        assert response["X-Request-ID"] == "edge-42"

    def test_incoming_id_is_truncated(self, client):
        response = client.get("/api/health/", HTTP_X_REQUEST_ID="x" * 200)

        assert response["X-Request-ID"] == "x" * 64

    def test_reset_after_response(self, client):
        client.get("/api/health/", HTTP_X_REQUEST_ID="edge-42")

        assert get_correlation_id() == "-"

    def test_filter_tags_records(self):
        record = logging.LogRecord("orders", logging.INFO, __file__, 1, "hello", None, None)

        assert CorrelationIdFilter().filter(record)
        assert record.correlation_id == "-"


class TestHealthCheck:
    def test_health(self, client):
        response = client.get("/api/health/")

        assert response.json() == {"status": "ok", "message": "Backend is running"}
