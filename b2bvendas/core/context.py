"""Request context management utilities for correlation IDs and request tracking."""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id_var: ContextVar[int | None] = ContextVar("user_id", default=None)


class RequestContext:
    """Async-safe storage for request-scoped values.

    The correlation ID is set by the request context middleware and the
    authenticated user ID by the session middleware, so log records and
    error responses can be tied back to the request that produced them.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context."""
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def set_user_id(user_id: int | None) -> None:
        """Set the authenticated user ID for the current context."""
        _user_id_var.set(user_id)

    @staticmethod
    def get_user_id() -> int | None:
        """Get the authenticated user ID from the current context."""
        return _user_id_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)
        _user_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID in the format 'req-<uuid4>'."""
    return f"req-{uuid.uuid4()}"
