"""
Request correlation ids for log records.

The id is kept in a context variable so it follows the request through
sync and async code without being passed around explicitly.
"""
import logging
from contextvars import ContextVar

_correlation_id = ContextVar("correlation_id", default="-")


def get_correlation_id():
    return _correlation_id.get()


def set_correlation_id(value):
    return _correlation_id.set(value)


def reset_correlation_id(token):
    _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation id to every log record."""

    def filter(self, record):
        record.correlation_id = get_correlation_id()
        return True
