"""Map exceptions to REST error payloads and headers, and back.

HTTP client and server adapters live in ``packages.rest_errors.http`` so the
core stays free of transport dependencies.
"""

from . import codes, constants
from .constants import HEADER_NAMES, TIMESTAMP_FORMAT, ErrorField, header_name
from .errors import RestApiResponseError, ServiceError
from .factories import (
    bad_request,
    conflict,
    forbidden,
    internal_error,
    not_found,
    service_error,
    service_unavailable,
    too_many_requests,
    unauthorized,
)
from .headers import format_timestamp, parse_timestamp, payload_from_headers, payload_to_headers
from .mapper import RestApiErrorMapper, build_mapper
from .model import ErrorPayload, HandlerInfo, StackTraceItem
from .parser import RestApiErrorParser
from .response_type import RestApiResponseType
from .status import detect_http_status, resolve_status

__all__ = [
    "HEADER_NAMES",
    "TIMESTAMP_FORMAT",
    "ErrorField",
    "ErrorPayload",
    "HandlerInfo",
    "RestApiErrorMapper",
    "RestApiErrorParser",
    "RestApiResponseError",
    "RestApiResponseType",
    "ServiceError",
    "StackTraceItem",
    "bad_request",
    "build_mapper",
    "codes",
    "conflict",
    "constants",
    "detect_http_status",
    "forbidden",
    "format_timestamp",
    "header_name",
    "internal_error",
    "not_found",
    "parse_timestamp",
    "payload_from_headers",
    "payload_to_headers",
    "resolve_status",
    "service_error",
    "service_unavailable",
    "too_many_requests",
    "unauthorized",
]
