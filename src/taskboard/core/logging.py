"""One-line JSON logs for the service and the uvicorn server.

Anything passed through ``extra=`` (``task_id``, ``connection_id``, ...)
becomes a top-level key of the emitted object.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import get_request_id

# Attributes every LogRecord carries; anything else came in through ``extra``.
_BUILTIN_RECORD_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "request_id"}

_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _json_safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: _json_safe(value)
        for key, value in record.__dict__.items()
        if key not in _BUILTIN_RECORD_FIELDS and not key.startswith("_")
    }


class JsonLogFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    ``defaults`` (service name, environment) are written first so record
    fields and extras win on a clash.
    """

    def __init__(self, *, defaults: dict[str, Any] | None = None, datefmt: str | None = None) -> None:
        super().__init__(datefmt=datefmt)
        self._defaults = dict(defaults or {})

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        emitted_at = datetime.fromtimestamp(record.created, tz=timezone.utc)
        document: dict[str, Any] = dict(self._defaults)
        document.update(
            timestamp=emitted_at.isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
            request_id=getattr(record, "request_id", "-"),
        )
        document.update(_record_extras(record))
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            document["stack"] = self.formatStack(record.stack_info)
        return json.dumps(document, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """Copy the correlation id bound in ``core.context`` onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = get_request_id()
        return True


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """``dictConfig`` schema routing every logger through one JSON stdout handler."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    loggers: dict[str, Any] = {
        "": {"handlers": ["stdout"], "level": level},
        "sqlalchemy.engine": {"level": logging.INFO if settings.db_echo else logging.WARNING},
    }
    for name in _SERVER_LOGGERS:
        loggers[name] = {"handlers": ["stdout"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonLogFormatter,
                "defaults": {"service": settings.project_name, "environment": settings.environment},
            }
        },
        "filters": {"request_context": {"()": RequestContextFilter}},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "level": level,
                "formatter": "json",
                "filters": ["request_context"],
            }
        },
        "loggers": loggers,
    }


def configure_logging(settings: Settings) -> None:
    logging.captureWarnings(True)
    logging.config.dictConfig(build_logging_config(settings))


__all__ = ["JsonLogFormatter", "RequestContextFilter", "build_logging_config", "configure_logging"]
