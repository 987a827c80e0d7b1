"""Domain errors and the handlers that turn them into JSON responses.

Every failure leaves the service as ``{"error", "code", "details"}`` with
the request id folded into ``details`` and echoed in ``X-Request-ID``.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, request_context
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for domain-specific errors.

    Subclasses pin ``code`` and ``status_code`` and supply a default message;
    both can still be overridden per raise.
    """

    code = "application_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(ApplicationError):
    """Input failed a business rule (missing name, unknown enum value, ...)."""

    code = "validation_error"
    default_message = "Validation failed"


class UnauthorizedError(ApplicationError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(ApplicationError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class NotFoundError(ApplicationError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApplicationError):
    """A uniqueness rule would be broken, e.g. a duplicate user name."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class DependentRecordsError(ConflictError):
    """A record cannot be removed while other rows still point at it.

    Answered with 400 rather than 409 because the caller is expected to fix
    the references (reassign tasks) and retry.
    """

    code = "has_dependents"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Record has dependents"


class ServerError(ApplicationError):
    code = "server_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class PersistenceError(ServerError):
    """The store rejected or failed a query for reasons other than integrity."""

    code = "persistence_error"
    default_message = "Database error"


_CODES_BY_STATUS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _attach_request_id(request_id: str | None, details: Any | None) -> Any | None:
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {"request_id": request_id, **details}
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    request_id = _request_id(request)
    body = ErrorResponse(error=message, code=code, details=_attach_request_id(request_id, details))
    response = JSONResponse(jsonable_encoder(body), status_code=status_code, headers=dict(headers or {}))
    if request_id and REQUEST_ID_HEADER not in response.headers:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


def _describe_http_exception(exc: StarletteHTTPException) -> tuple[str, Any | None]:
    """Message and details for a framework HTTP error (404 route, 405 method, ...)."""
    if isinstance(exc.detail, str):
        return exc.detail, None
    try:
        return HTTPStatus(exc.status_code).phrase, exc.detail
    except ValueError:
        return "Error", exc.detail


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to ``app``."""

    @app.exception_handler(ApplicationError)
    async def _on_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        with request_context(_request_id(request)):
            context = {"code": exc.code, "status_code": exc.status_code}
            if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
                logger.error(exc.message, exc_info=exc.__cause__ or exc, extra=context)
            else:
                logger.warning("Request rejected", extra={**context, "reason": exc.message})
            return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def _on_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        with request_context(_request_id(request)):
            logger.warning("Request body or query rejected", extra={"errors": errors})
            return _error_response(
                request,
                status.HTTP_400_BAD_REQUEST,
                "validation_error",
                "Request validation failed",
                {"errors": errors},
            )

    @app.exception_handler(IntegrityError)
    async def _on_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        with request_context(_request_id(request)):
            logger.error("Store refused write: integrity constraint", exc_info=exc)
            return _error_response(
                request,
                status.HTTP_409_CONFLICT,
                "db_integrity_error",
                "Database integrity violation",
            )

    @app.exception_handler(StarletteHTTPException)
    async def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _CODES_BY_STATUS.get(exc.status_code, "http_error")
        message, details = _describe_http_exception(exc)
        with request_context(_request_id(request)):
            logger.warning(
                "Framework HTTP error",
                extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _error_response(request, exc.status_code, code, message, details, exc.headers)

    @app.exception_handler(Exception)
    async def _on_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        with request_context(_request_id(request)):
            logger.exception("Unhandled application error", exc_info=exc)
            return _error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                ServerError.code,
                ServerError.default_message,
            )


__all__ = [
    "ApplicationError",
    "ConflictError",
    "DependentRecordsError",
    "ForbiddenError",
    "NotFoundError",
    "PersistenceError",
    "ServerError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
