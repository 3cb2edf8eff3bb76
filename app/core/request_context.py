"""Request context for correlating log lines with an HTTP request."""

from contextvars import ContextVar
from typing import Optional

# Context variable for request_id
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> None:
    """Set the current request ID.

    Args:
        request_id: Request ID to set in context
    """
    request_id_var.set(request_id)


def get_current_request_id() -> str | None:
    """Get the current request ID.

    Returns:
        Current request ID or None outside of a request
    """
    return request_id_var.get()


def clear_request_id() -> None:
    """Clear the current request ID."""
    request_id_var.set(None)
