"""Correlation identifiers shared by HTTP requests, websocket frames and logs."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

REQUEST_ID_HEADER = "X-Request-ID"

_request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")


def get_request_id() -> str:
    """Return the request identifier for the current execution context."""

    return _request_id_ctx_var.get()


def generate_request_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def request_context(request_id: str | None = None) -> Iterator[str]:
    """Bind ``request_id`` (or a fresh one) for the duration of the block."""

    bound = request_id or generate_request_id()
    token = _request_id_ctx_var.set(bound)
    try:
        yield bound
    finally:
        _request_id_ctx_var.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "generate_request_id",
    "get_request_id",
    "request_context",
]
