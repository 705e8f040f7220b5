"""Utility functions and decorators for distributed tracing"""
import logging
from collections.abc import Callable
from functools import wraps

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)

SENSITIVE_ARGUMENTS = frozenset({"password", "old_password", "new_password", "token", "secret"})


def traced(operation_name: str | None = None, attributes: dict | None = None):
    """
    Decorator to create a span around a coroutine function

    Usage:
        @traced("authorization.resolve")
        async def resolve_effective_permissions(self, user_id: str):
            ...

    Args:
        operation_name: Name of the operation (defaults to module.function)
        attributes: Additional attributes to add to the span
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            tracer = trace.get_tracer(__name__)
            span_name = operation_name or f"{func.__module__}.{func.__name__}"

            with tracer.start_as_current_span(span_name) as span:
                if attributes:
                    for key, value in attributes.items():
                        span.set_attribute(key, value)

                for key, value in kwargs.items():
                    if not key.startswith("_") and key not in SENSITIVE_ARGUMENTS:
                        span.set_attribute(f"arg.{key}", str(value))

                try:
                    result = await func(*args, **kwargs)
                    span.set_status(Status(StatusCode.OK))
                    return result
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

        return wrapper

    return decorator


def add_span_attributes(**attributes):
    """Add attributes to the current span, if one is recording"""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, str(value))


def get_current_trace_id() -> str | None:
    """Hex trace id of the active span, or None outside a valid span"""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")
