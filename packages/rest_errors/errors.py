"""Exception types that carry an HTTP status.

``ServiceError`` is raised by application code that already knows which
status a failure deserves. ``RestApiResponseError`` is rebuilt on the client
side from a received HTTP error response and carries its transport status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from http import HTTPStatus
from typing import Mapping

from .model import ErrorPayload


@dataclass(eq=False)
class ServiceError(Exception):
    """Application error with an assigned HTTP status and optional error code."""

    message: str
    status_code: int | None = None
    error_code: str | None = None

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(eq=False)
class RestApiResponseError(Exception):
    """Error reconstructed from a received HTTP error response."""

    message: str
    status_code: int
    payload: ErrorPayload = field(default_factory=ErrorPayload)
    method: str = ""
    url: str = ""
    response_headers: Mapping[str, str] = field(default_factory=dict)
    response_body: bytes = b""
    retry_after: datetime | None = None

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message

    @property
    def retryable(self) -> bool:
        """Return ``True`` when the remote side signalled a transient failure."""
        return (
            self.status_code >= 500
            or self.status_code == HTTPStatus.TOO_MANY_REQUESTS
            or self.retry_after is not None
        )

    @classmethod
    def from_payload(cls, payload: ErrorPayload) -> RestApiResponseError:
        """Build an error whose transport status is taken from ``payload``."""
        status = HTTPStatus.INTERNAL_SERVER_ERROR
        if payload.status is not None:
            try:
                status = HTTPStatus(payload.status)
            except ValueError:
                pass
        return cls(
            message=payload.message or status.phrase,
            status_code=int(status),
            payload=payload,
        )
