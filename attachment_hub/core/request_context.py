"""Request correlation ID propagation.

The ID set by the request middleware is picked up by ``log_json`` so that
service-level events line up with the request log line.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import uuid4

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get the current request correlation ID (if any)."""

    return _request_id_var.get()


def new_request_id() -> str:
    """Generate a new correlation ID."""

    return str(uuid4())


@contextmanager
def request_id_context(request_id: str | None):
    """Set the correlation ID for the duration of the block."""

    token: Token[str | None] = _request_id_var.set(request_id)
    try:
        yield
    finally:
        _request_id_var.reset(token)
