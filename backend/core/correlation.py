"""
Correlation ID generation and context management.

Every request carries a short ID that ties together log lines, Sentry events
and the error body returned to the client, so a resident reporting "it said
error abc123de" can be traced.
"""

import re
import uuid
from contextvars import ContextVar

# Context variable for request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Incoming IDs are echoed into logs and headers, so keep them boring.
_INCOMING_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]{1,64}$")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Returns:
        8-character hexadecimal string (e.g. "abc123de").
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Return the current request's correlation ID, or "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID for the current request context."""
    correlation_id_var.set(correlation_id)


def resolve_correlation_id(incoming: str | None) -> str:
    """
    Pick the correlation ID for a request.

    Reuses the ID sent by the frontend in ``X-Correlation-ID`` when it looks
    sane, otherwise generates a fresh one.

    Args:
        incoming: Raw header value, if any.

    Returns:
        Correlation ID to use for this request.
    """
    if incoming and _INCOMING_ID_PATTERN.match(incoming):
        return incoming
    return generate_correlation_id()
