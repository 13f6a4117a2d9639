"""Request-scoped context shared by middleware and logging."""

import uuid
from contextvars import ContextVar

# Empty outside of a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """Generate a request ID (32 hex characters)."""
    return uuid.uuid4().hex


def get_request_id() -> str:
    """Get the current request's ID, or empty string if not set."""
    return request_id_var.get()


def set_request_id(request_id: str):
    """Set the request ID for the current context.

    Returns:
        Token for ``request_id_var.reset``
    """
    return request_id_var.set(request_id)
