import logging
import uuid

from django.utils.deprecation import MiddlewareMixin

from .log_context import reset_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(MiddlewareMixin):
    """
    Tags every request with a correlation id.

    The id is taken from the incoming X-Request-ID header when present so that
    log lines can be matched with the edge layer, otherwise a new one is
    generated. It is echoed back on the response.
    """

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"
    MAX_LENGTH = 64

    def process_request(self, request):
        incoming = request.META.get(self.HEADER, "").strip()
        correlation_id = incoming[: self.MAX_LENGTH] if incoming else uuid.uuid4().hex
        request.correlation_id = correlation_id
        request._correlation_token = set_correlation_id(correlation_id)
        return None

    def process_response(self, request, response):
        correlation_id = getattr(request, "correlation_id", None)
        if correlation_id:
            response[self.RESPONSE_HEADER] = correlation_id
        token = getattr(request, "_correlation_token", None)
        if token is not None:
            reset_correlation_id(token)
        return response
