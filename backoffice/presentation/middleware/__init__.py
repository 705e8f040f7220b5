"""
Middleware layer for the back-office application.

This package contains middleware components for request processing
such as trace id propagation.
"""

from backoffice.presentation.middleware.trace_id import TraceIdMiddleware

__all__ = ["TraceIdMiddleware"]
