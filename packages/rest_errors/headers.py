"""Encode error payloads into response headers and decode them back."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from http import HTTPStatus
from typing import Mapping

from .constants import (
    APPLICATION_HEADER_NAME,
    CODE_HEADER_NAME,
    CODE_INHERITED_HEADER_NAME,
    EXCEPTION_HEADER_NAME,
    ID_HEADER_NAME,
    MESSAGE_HEADER_NAME,
    NO_CLASS_VALUE,
    NO_ERROR_CODE_VALUE,
    NO_ID_VALUE,
    NO_MESSAGE_VALUE,
    PATH_HEADER_NAME,
    TIMESTAMP_HEADER_NAME,
)
from .logging import get_logger
from .model import ErrorPayload

_LOGGER = get_logger(__name__)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as an RFC 1123 date in GMT; naive values are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse one RFC 1123 date, returning ``None`` when absent or invalid."""
    if value is None or not value.strip():
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        _LOGGER.debug("Parsing error timestamp failed: %s", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def payload_to_headers(
    payload: ErrorPayload,
    *,
    now: datetime | None = None,
) -> dict[str, str]:
    """Return response headers mirroring the payload's error attributes.

    The timestamp header is always present; ``now`` (default: current UTC
    time) is used when the payload carries none.
    """
    headers: dict[str, str] = {}
    if payload.id:
        headers[ID_HEADER_NAME] = _header_value(payload.id)

    timestamp = payload.timestamp or now or datetime.now(UTC)
    headers[TIMESTAMP_HEADER_NAME] = format_timestamp(timestamp)

    if payload.error_code:
        headers[CODE_HEADER_NAME] = _header_value(payload.error_code)
        headers[CODE_INHERITED_HEADER_NAME] = str(payload.error_code_inherited).lower()
    if payload.message:
        headers[MESSAGE_HEADER_NAME] = _header_value(payload.message)
    if payload.class_name:
        headers[EXCEPTION_HEADER_NAME] = _header_value(payload.class_name)
    if payload.application:
        headers[APPLICATION_HEADER_NAME] = _header_value(payload.application)
    if payload.path:
        headers[PATH_HEADER_NAME] = _header_value(payload.path)
    return headers


def payload_from_headers(
    headers: Mapping[str, str],
    *,
    body_text: str | None = None,
    status_code: int | None = None,
) -> ErrorPayload:
    """Rebuild a payload from error headers; lookups are case-insensitive.

    Non-blank ``body_text`` takes precedence over the message header.
    """
    normalized = {key.lower(): value for key, value in headers.items()}

    def _get(name: str, sentinel: str | None = None) -> str | None:
        value = normalized.get(name.lower())
        if value is None or not value.strip() or value == sentinel:
            return None
        return value

    if body_text is not None and body_text.strip():
        message = body_text
    else:
        message = _get(MESSAGE_HEADER_NAME) or NO_MESSAGE_VALUE

    error_code = _get(CODE_HEADER_NAME, NO_ERROR_CODE_VALUE)
    inherited = _get(CODE_INHERITED_HEADER_NAME)

    status: int | None = None
    reason: str | None = None
    if status_code is not None:
        status = status_code
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = None

    return ErrorPayload(
        id=_get(ID_HEADER_NAME, NO_ID_VALUE),
        timestamp=parse_timestamp(_get(TIMESTAMP_HEADER_NAME)),
        status=status,
        error=reason,
        message=message,
        error_code=error_code,
        error_code_inherited=error_code is not None
        and inherited is not None
        and inherited.strip().lower() == "true",
        class_name=_get(EXCEPTION_HEADER_NAME, NO_CLASS_VALUE),
        application=_get(APPLICATION_HEADER_NAME),
        path=_get(PATH_HEADER_NAME),
    )


def _header_value(value: str) -> str:
    """Collapse line breaks and replace characters outside latin-1."""
    single_line = " ".join(value.splitlines())
    return single_line.encode("latin-1", errors="replace").decode("latin-1")
