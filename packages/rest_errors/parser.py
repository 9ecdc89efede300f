"""Rebuild error payloads from received HTTP error responses."""

from __future__ import annotations

import codecs
from http import HTTPStatus
from typing import Mapping

from pydantic import ValidationError

from .headers import payload_from_headers
from .logging import get_logger
from .model import ErrorPayload
from .response_type import RestApiResponseType

_LOGGER = get_logger(__name__)


class RestApiErrorParser:
    """Parse a response body and headers into an ``ErrorPayload``.

    A JSON body is used as-is when it validates as a payload carrying at least
    one known field. Anything else falls back to the error headers, with the
    body text (if any) as the message.
    """

    def __init__(self, *, default_charset: str = "utf-8") -> None:
        codecs.lookup(default_charset)
        self._default_charset = default_charset

    @property
    def default_charset(self) -> str:
        """Return the charset used when the content type declares none."""
        return self._default_charset

    def parse(
        self,
        body: bytes | str | None,
        headers: Mapping[str, str],
        *,
        status_code: int | None = None,
    ) -> ErrorPayload:
        """Return the payload described by one error response."""
        content_type = _header(headers, "content-type")
        text = self._decode(body, content_type)
        response_type = RestApiResponseType.detect_by_content_type(content_type)

        payload: ErrorPayload | None = None
        if text is not None and text.strip() and response_type is RestApiResponseType.JSON:
            payload = self._parse_json(text)

        if payload is None:
            return payload_from_headers(headers, body_text=text, status_code=status_code)
        return _with_status(payload, status_code)

    def _decode(self, body: bytes | str | None, content_type: str | None) -> str | None:
        if body is None:
            return None
        if isinstance(body, str):
            return body
        if len(body) == 0:
            return None
        charset = _charset(content_type) or self._default_charset
        try:
            return body.decode(charset, errors="replace")
        except LookupError:
            _LOGGER.debug("Unknown response charset %s, using %s", charset, self._default_charset)
            return body.decode(self._default_charset, errors="replace")

    def _parse_json(self, text: str) -> ErrorPayload | None:
        try:
            payload = ErrorPayload.model_validate_json(text)
        except ValidationError:
            _LOGGER.debug("Response body is not a JSON error payload")
            return None
        if not payload.model_fields_set:
            _LOGGER.debug("Response body carries no error payload fields")
            return None
        return payload


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _charset(content_type: str | None) -> str | None:
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return None


def _with_status(payload: ErrorPayload, status_code: int | None) -> ErrorPayload:
    if status_code is None or payload.status is not None:
        return payload
    update: dict[str, object] = {"status": status_code}
    if payload.error is None:
        try:
            update["error"] = HTTPStatus(status_code).phrase
        except ValueError:
            pass
    return payload.model_copy(update=update)
