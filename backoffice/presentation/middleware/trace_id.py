"""Trace id middleware for request correlation"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from backoffice.infrastructure.config.settings import get_settings
from backoffice.shared.context import clear_context, set_request_metadata
from backoffice.shared.telemetry.tracing import get_current_trace_id


class TraceIdMiddleware(BaseHTTPMiddleware):
    """
    Give every request a trace id.

    - Accepts the configured trace header (default X-Trace-ID) from clients
    - Falls back to the active OpenTelemetry trace, then a fresh id
    - Publishes it, with client ip and user agent, to the request context
      so audit entries, denial entries and log lines carry it
    - Echoes it on the response
    """

    def __init__(self, app, header_name: str | None = None):
        super().__init__(app)
        self.header_name = header_name or get_settings().trace_id_header_name

    async def dispatch(self, request: Request, call_next):
        trace_id = (
            request.headers.get(self.header_name) or get_current_trace_id() or uuid.uuid4().hex
        )

        request.state.trace_id = trace_id
        set_request_metadata(
            trace_id=trace_id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[self.header_name] = trace_id
        return response
