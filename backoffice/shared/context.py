"""
Request context management using contextvars.

Provides async-safe storage for request-scoped data like the current
operator and the trace id used to correlate audit entries.

Usage:
    # In middleware or dependency injection:
    set_current_user(user_id="user123", username="alice")

    # In any code that needs the current operator:
    user_id = get_current_actor_id()  # Returns "user123" or None

    # Context is automatically reset per request due to contextvars
"""

from contextvars import ContextVar
from dataclasses import dataclass

# Context variables for request-scoped data
_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)
_current_username: ContextVar[str | None] = ContextVar("current_username", default=None)
_current_ip_address: ContextVar[str | None] = ContextVar("current_ip_address", default=None)
_current_user_agent: ContextVar[str | None] = ContextVar("current_user_agent", default=None)
_current_trace_id: ContextVar[str | None] = ContextVar("current_trace_id", default=None)

SYSTEM_OPERATOR_NAME = "system"


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    user_id: str | None
    username: str | None
    ip_address: str | None = None
    user_agent: str | None = None
    trace_id: str | None = None

    @property
    def operator_name(self) -> str:
        """Display name recorded in audit entries (system when anonymous)."""
        return self.username or SYSTEM_OPERATOR_NAME


def set_current_user(
    user_id: str | None,
    username: str | None = None,
) -> None:
    """
    Set the current operator for this request.

    Call this in the authentication dependency once the token is verified.
    """
    _current_user_id.set(user_id)
    _current_username.set(username)


def set_request_metadata(
    trace_id: str | None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Record transport-level metadata (set by TraceIdMiddleware)."""
    _current_trace_id.set(trace_id)
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def clear_context() -> None:
    """Clear the whole request context."""
    _current_user_id.set(None)
    _current_username.set(None)
    _current_ip_address.set(None)
    _current_user_agent.set(None)
    _current_trace_id.set(None)


def get_current_actor_id() -> str | None:
    """Get the current user ID, or None if not authenticated."""
    return _current_user_id.get()


def get_current_trace_id() -> str | None:
    """Get the trace id of the current request."""
    return _current_trace_id.get()


def get_actor_context() -> ActorContext:
    """Get a snapshot of the current actor context."""
    return ActorContext(
        user_id=_current_user_id.get(),
        username=_current_username.get(),
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
        trace_id=_current_trace_id.get(),
    )
