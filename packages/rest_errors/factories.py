"""Factory helpers for creating consistent service errors."""

from __future__ import annotations

from http import HTTPStatus

from . import codes
from .errors import ServiceError
from .status import resolve_status


def service_error(
    status: int | HTTPStatus,
    message: str | None = None,
    *,
    code: str | None = None,
) -> ServiceError:
    """Create a service error for any status.

    A blank message falls back to the status reason phrase. Codes outside the
    standard registry are dropped so that status detection falls back to the
    configured mapping.
    """
    resolved = resolve_status(status)
    if message is None or not message.strip():
        message = resolved.phrase if resolved is not None else ""
    return ServiceError(
        message=message,
        status_code=int(resolved) if resolved is not None else None,
        error_code=code,
    )


def bad_request(message: str | None = None, *, code: str = codes.VALIDATION_ERROR) -> ServiceError:
    """Create a 400 error."""
    return service_error(HTTPStatus.BAD_REQUEST, message, code=code)


def unauthorized(message: str | None = None, *, code: str = codes.UNAUTHENTICATED) -> ServiceError:
    """Create a 401 error."""
    return service_error(HTTPStatus.UNAUTHORIZED, message, code=code)


def forbidden(message: str | None = None, *, code: str = codes.PERMISSION_DENIED) -> ServiceError:
    """Create a 403 error."""
    return service_error(HTTPStatus.FORBIDDEN, message, code=code)


def not_found(message: str | None = None, *, code: str = codes.NOT_FOUND) -> ServiceError:
    """Create a 404 error."""
    return service_error(HTTPStatus.NOT_FOUND, message, code=code)


def conflict(message: str | None = None, *, code: str = codes.CONFLICT) -> ServiceError:
    """Create a 409 error."""
    return service_error(HTTPStatus.CONFLICT, message, code=code)


def too_many_requests(message: str | None = None, *, code: str = codes.RATE_LIMITED) -> ServiceError:
    """Create a 429 error."""
    return service_error(HTTPStatus.TOO_MANY_REQUESTS, message, code=code)


def service_unavailable(
    message: str | None = None,
    *,
    code: str = codes.DEPENDENCY_UNAVAILABLE,
) -> ServiceError:
    """Create a 503 error."""
    return service_error(HTTPStatus.SERVICE_UNAVAILABLE, message, code=code)


def internal_error(message: str | None = None, *, code: str = codes.INTERNAL_ERROR) -> ServiceError:
    """Create a 500 error."""
    return service_error(HTTPStatus.INTERNAL_SERVER_ERROR, message, code=code)
