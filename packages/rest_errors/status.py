"""HTTP status detection for raised or received errors."""

from __future__ import annotations

from http import HTTPStatus

from .errors import RestApiResponseError, ServiceError

FALLBACK_STATUS = HTTPStatus.INTERNAL_SERVER_ERROR


def resolve_status(value: int | HTTPStatus | None) -> HTTPStatus | None:
    """Return the registered ``HTTPStatus`` for ``value`` or ``None``."""
    if value is None:
        return None
    try:
        return HTTPStatus(int(value))
    except (TypeError, ValueError):
        return None


def detect_http_status(
    error: BaseException | None,
    default_status: int | HTTPStatus | None = None,
) -> HTTPStatus:
    """Return the HTTP status that best represents ``error``.

    A transport status received from a remote response wins over a status
    assigned by application code. Errors carrying neither, or carrying a code
    outside the standard registry, resolve to ``default_status`` and finally
    to 500. This function never raises.
    """
    match error:
        case RestApiResponseError(status_code=transport_status):
            detected = resolve_status(transport_status)
        case ServiceError(status_code=application_status):
            detected = resolve_status(application_status)
        case _:
            detected = None

    if detected is not None:
        return detected
    return resolve_status(default_status) or FALLBACK_STATUS
