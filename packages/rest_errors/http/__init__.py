"""Public HTTP adapter API for REST error mapping."""

from .client import AsyncHttpClient, HttpClient, decode_error_response, determine_retry_after
from .errors import HttpClientError, HttpJsonDecodeError, HttpRequestError
from .server import (
    create_app,
    install_exception_handlers,
    is_responsible,
    path_matches,
    render_error_response,
    run_app,
)

__all__ = [
    "AsyncHttpClient",
    "HttpClient",
    "HttpClientError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "create_app",
    "decode_error_response",
    "determine_retry_after",
    "install_exception_handlers",
    "is_responsible",
    "path_matches",
    "render_error_response",
    "run_app",
]
