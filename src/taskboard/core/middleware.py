"""HTTP middleware."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .context import REQUEST_ID_HEADER, request_context

_MAX_CLIENT_ID_LENGTH = 128


def _usable_client_id(raw: str | None) -> str | None:
    """A caller-supplied id is reused only when it is short, printable text."""
    if raw is None:
        return None
    candidate = raw.strip()
    if not candidate or len(candidate) > _MAX_CLIENT_ID_LENGTH or not candidate.isprintable():
        return None
    return candidate


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the whole request and echo it in ``X-Request-ID``.

    Error handlers read it back from ``request.state.request_id``.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = _usable_client_id(request.headers.get(self.header_name))
        with request_context(incoming) as request_id:
            request.state.request_id = request_id
            response = await call_next(request)
        if self.header_name not in response.headers:
            response.headers[self.header_name] = request_id
        return response


__all__ = ["CorrelationIdMiddleware"]
