"""Negotiation between JSON error bodies and header-only error responses."""

from __future__ import annotations

from enum import Enum


class RestApiResponseType(str, Enum):
    """How an error payload is transported; the value is its content type."""

    JSON = "application/json"
    HEADER = "text/plain"

    @property
    def content_type(self) -> str:
        """Return the response content type for this representation."""
        return self.value

    @classmethod
    def detect_by_accepted(cls, accept: str | None) -> RestApiResponseType:
        """Choose a representation from an ``Accept`` header value.

        Any range that admits ``application/json``, ``text/plain`` or an
        ``application/*+json`` type selects JSON. A missing or empty header
        selects header-only transport.
        """
        for media_range in _media_types(accept):
            if (
                _includes(media_range, "application/json")
                or _includes(media_range, "text/plain")
                or _includes("application/*+json", media_range)
            ):
                return cls.JSON
        return cls.HEADER

    @classmethod
    def detect_by_content_type(cls, content_type: str | None) -> RestApiResponseType:
        """Choose a representation from a response ``Content-Type`` value."""
        media_types = _media_types(content_type)
        if media_types and _is_json(media_types[0]):
            return cls.JSON
        return cls.HEADER


def _media_types(header: str | None) -> list[str]:
    """Split a header into lower-cased ``type/subtype`` entries without params."""
    if not header:
        return []
    output: list[str] = []
    for item in header.split(","):
        media_type = item.split(";", 1)[0].strip().lower()
        if "/" in media_type:
            output.append(media_type)
    return output


def _is_json(media_type: str) -> bool:
    main_type, _, sub_type = media_type.partition("/")
    return main_type == "application" and (sub_type == "json" or sub_type.endswith("+json"))


def _includes(media_range: str, media_type: str) -> bool:
    """Return ``True`` when ``media_range`` admits ``media_type``."""
    range_type, _, range_sub = media_range.partition("/")
    other_type, _, other_sub = media_type.partition("/")
    if range_type == "*":
        return True
    if range_type != other_type:
        return False
    if range_sub in ("*", other_sub):
        return True
    if range_sub.startswith("*+"):
        return other_sub.endswith(range_sub[1:])
    return False
