"""Errors raised by the HTTP clients when no error response can be decoded.

Error responses themselves surface as ``RestApiResponseError``. The types
here cover failures where there is no error response to decode: transport
failures, and successful responses whose JSON body is invalid.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class HttpClientError(Exception):
    """Outbound call failure for one request."""

    message: str
    method: str
    url: str
    retryable: bool = False
    cause: Exception | None = None

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(eq=False)
class HttpRequestError(HttpClientError):
    """No response was received."""

    retryable: bool = True


@dataclass(eq=False)
class HttpJsonDecodeError(HttpClientError):
    """A successful response whose body is not valid JSON."""

    status_code: int = 0
    response_body: str = ""
