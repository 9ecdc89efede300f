"""Stdout logging configuration.

Records are written as newline-delimited JSON or as plain text. Both
formats append the bound context. A record may also carry a mapped error
payload through ``extra={"error_payload": payload}``. The JSON formatter
embeds it under ``error`` and the plain formatter summarizes it.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from ..config.models import LoggingSettings
from ..model import ErrorPayload
from . import fields
from .context import bind_context, get_context

PAYLOAD_ATTRIBUTE = "error_payload"


class ContextFilter(logging.Filter):
    """Attach a snapshot of the bound logging context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


def _context_of(record: logging.LogRecord) -> dict[str, str]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


def _payload_of(record: logging.LogRecord) -> ErrorPayload | None:
    payload = getattr(record, PAYLOAD_ATTRIBUTE, None)
    return payload if isinstance(payload, ErrorPayload) else None


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **_context_of(record),
        }
        payload = _payload_of(record)
        if payload is not None:
            document[fields.ERROR] = payload.to_json_dict()
        if record.exc_info:
            document[fields.EXCEPTION] = self.formatException(record.exc_info)
        return json.dumps(document, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Single-line text formatter with ``key=value`` context."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = dict(_context_of(record))
        payload = _payload_of(record)
        if payload is not None:
            # Explicit payload values win over the bound context.
            extras.update(
                {
                    key: str(value)
                    for key, value in {
                        fields.STATUS: payload.status,
                        fields.ERROR_CODE: payload.error_code,
                    }.items()
                    if value is not None
                }
            )
        if not extras:
            return line
        return line + " " + " ".join(f"{key}={value}" for key, value in sorted(extras.items()))


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Route root logging to one stdout handler, replacing earlier handlers."""
    level = level.upper()
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})


def configure_logging_from_settings(settings: LoggingSettings) -> None:
    """Configure root logging from a ``LoggingSettings`` model."""
    configure_logging(**settings.model_dump())


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger from the standard logging hierarchy."""
    return logging.getLogger(name)
