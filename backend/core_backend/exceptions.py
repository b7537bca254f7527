"""
Service-level exception taxonomy and the DRF exception handler that maps it
onto HTTP responses.

Services raise these exceptions; views let them propagate and the handler
turns them into ``{"error": message}`` responses with the matching status.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core_backend.infrastructure.log_context import get_correlation_id

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Base exception for service errors.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when input is malformed or missing"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(ServiceError):
    """Raised when a referenced entity does not exist"""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AuthorizationError(ServiceError):
    """Raised when the caller is not entitled to mutate an entity"""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to perform this action"


class BusinessRuleViolation(ServiceError):
    """Raised for expected, actionable business outcomes (insufficient balance, limits, ...)"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request violates a business rule"


class ExternalServiceError(ServiceError):
    """Raised when a call to an external provider fails or times out"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "External service unavailable"


class UnexpectedError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def service_exception_handler(exc, context):
    """
    Custom exception handler that renders ServiceError subclasses and hides
    unexpected failures behind a generic message.
    """
    request = context.get("request")
    path = getattr(request, "path", "")
    correlation_id = get_correlation_id()

    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__} on {path}: {exc.message}",
                exc_info=exc,
            )
        else:
            logger.warning(f"{exc.__class__.__name__} on {path}: {exc.message}")

        data = {"error": exc.message}
        if exc.status_code >= 500:
            data["correlation_id"] = correlation_id
        if exc.details:
            data["details"] = exc.details
        return Response(data, status=exc.status_code)

    # Call the default exception handler for DRF and Django exceptions
    response = exception_handler(exc, context)
    if response is not None:
        return response

    logger.error(
        f"Unhandled {exc.__class__.__name__} on {path} (correlation_id={correlation_id})",
        exc_info=exc,
    )
    return Response(
        {
            "error": UnexpectedError.default_message,
            "correlation_id": correlation_id,
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
