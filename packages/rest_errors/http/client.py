"""HTTP client wrappers over httpx that decode REST error responses."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from ..errors import RestApiResponseError
from ..headers import parse_timestamp
from ..logging import error_context, fields, get_logger, log_context
from ..parser import RestApiErrorParser
from .errors import HttpJsonDecodeError, HttpRequestError

_LOGGER = get_logger(__name__)
_DELTA_SECONDS = re.compile(r"^[0-9]+\.?0*$")

DEFAULT_HEADERS = {"Accept": "application/json, text/plain"}


def determine_retry_after(
    value: str | None,
    *,
    now: datetime | None = None,
) -> datetime | None:
    """Resolve a ``Retry-After`` value into an absolute UTC instant.

    Integral delta seconds (``"120"``, ``"120.0"``) are added to ``now``;
    anything else must be an RFC 1123 date.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    if _DELTA_SECONDS.match(value):
        seconds = int(value.split(".", 1)[0])
        return (now or datetime.now(UTC)) + timedelta(seconds=seconds)
    parsed = parse_timestamp(value)
    if parsed is None:
        _LOGGER.warning("Parsing Retry-After value failed: %s", value)
    return parsed


def decode_error_response(
    response: httpx.Response,
    parser: RestApiErrorParser,
) -> RestApiResponseError:
    """Build a typed error from one HTTP error response."""
    request = response.request
    method = request.method
    url = str(request.url)
    headers = dict(response.headers.items())
    body = response.content
    payload = parser.parse(body, headers, status_code=response.status_code)

    with log_context({fields.METHOD: method, fields.URL: url, **error_context(payload)}):
        _LOGGER.debug("Received error response: %s", payload.message)
    return RestApiResponseError(
        message=f"Status {response.status_code} reading {method} {url}",
        status_code=response.status_code,
        payload=payload,
        method=method,
        url=url,
        response_headers=headers,
        response_body=body,
        retry_after=determine_retry_after(response.headers.get("retry-after")),
    )


def _request_error(exc: httpx.RequestError, method: str, url: str) -> HttpRequestError:
    try:
        request = exc.request
    except RuntimeError:
        request = None
    request_url = str(request.url) if request is not None else url
    request_method = request.method if request is not None else method.upper()
    return HttpRequestError(
        message=f"HTTP request failed for {request_method} {request_url}",
        method=request_method,
        url=request_url,
        retryable=True,
        cause=exc,
    )


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise HttpJsonDecodeError(
            message=f"Invalid JSON response for {response.request.method} {response.request.url}",
            method=response.request.method,
            url=str(response.request.url),
            retryable=False,
            status_code=response.status_code,
            response_body=response.text,
            cause=exc,
        ) from exc


def _client_options(
    base_url: str,
    timeout_seconds: float,
    headers: Mapping[str, str] | None,
    follow_redirects: bool,
) -> dict[str, Any]:
    """Return httpx client options; JSON error bodies are requested by default."""
    merged = httpx.Headers(DEFAULT_HEADERS)
    merged.update(headers or {})
    return {
        "base_url": base_url,
        "timeout": timeout_seconds,
        "headers": merged,
        "follow_redirects": follow_redirects,
    }


class HttpClient:
    """Synchronous ``httpx.Client`` wrapper raising ``RestApiResponseError``.

    Pass ``client`` to reuse an existing ``httpx.Client``; it is then left
    open by ``close``.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
        parser: RestApiErrorParser | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            transport=transport,
            **_client_options(base_url, timeout_seconds, headers, follow_redirects),
        )
        self._parser = parser or RestApiErrorParser()

    def close(self) -> None:
        """Close the underlying httpx client when this wrapper created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpClient:
        """Return this client for use in a ``with`` block."""
        return self

    def __exit__(self, *_: object) -> None:
        """Close the client when the ``with`` block exits."""
        self.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request; error statuses raise ``RestApiResponseError``."""
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise _request_error(exc, method, url) from exc
        if raise_for_status and response.is_error:
            raise decode_error_response(response, self._parser)
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request."""
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a PUT request."""
        return self.request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a DELETE request."""
        return self.request("DELETE", url, **kwargs)

    def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send one request and decode the JSON body of a successful response."""
        return _decode_json(self.request(method, url, **kwargs))

    def get_json(self, url: str, **kwargs: Any) -> Any:
        """Send a GET request and decode its JSON body."""
        return self.request_json("GET", url, **kwargs)


class AsyncHttpClient:
    """Asynchronous counterpart of ``HttpClient`` over ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
        parser: RestApiErrorParser | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport,
            **_client_options(base_url, timeout_seconds, headers, follow_redirects),
        )
        self._parser = parser or RestApiErrorParser()

    async def aclose(self) -> None:
        """Close the underlying httpx client when this wrapper created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        """Return this client for use in an ``async with`` block."""
        return self

    async def __aexit__(self, *_: object) -> None:
        """Close the client when the ``async with`` block exits."""
        await self.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request; error statuses raise ``RestApiResponseError``."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise _request_error(exc, method, url) from exc
        if raise_for_status and response.is_error:
            # Streamed bodies must be read before the parser sees them.
            await response.aread()
            raise decode_error_response(response, self._parser)
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request."""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request."""
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a PUT request."""
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a DELETE request."""
        return await self.request("DELETE", url, **kwargs)

    async def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send one request and decode the JSON body of a successful response."""
        return _decode_json(await self.request(method, url, **kwargs))

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """Send a GET request and decode its JSON body."""
        return await self.request_json("GET", url, **kwargs)
