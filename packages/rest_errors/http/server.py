"""FastAPI exception handlers rendering REST error payloads."""

from __future__ import annotations

import re
from functools import lru_cache
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import RestApiResponseError, ServiceError
from ..headers import payload_to_headers
from ..logging import PAYLOAD_ATTRIBUTE, error_context, get_logger, log_context
from ..mapper import RestApiErrorMapper
from ..mapping import mapped_exception_classes
from ..model import ErrorPayload
from ..response_type import RestApiResponseType

_LOGGER = get_logger(__name__)

IdProvider = Callable[[Request], str | None]
_Fallback = Callable[[Request, Any], Awaitable[Response]]


def create_app(
    *,
    title: str = "rest_errors",
    version: str = "0.0.0",
    mapper: RestApiErrorMapper | None = None,
) -> FastAPI:
    """Create a FastAPI app, installing error handlers when a mapper is given."""
    app = FastAPI(title=title, version=version)
    if mapper is not None:
        install_exception_handlers(app, mapper)
    return app


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn."""
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def path_matches(pattern: str, path: str) -> bool:
    """Match ``path`` against an Ant-style pattern (``**``, ``*``, ``?``)."""
    return _compile_pattern(pattern).fullmatch(path) is not None


def is_responsible(api_paths: Sequence[str], path: str) -> bool:
    """Return ``True`` when errors on ``path`` should be rendered as payloads.

    An empty pattern list covers every path.
    """
    if not api_paths:
        return True
    return any(path_matches(pattern, path) for pattern in api_paths)


def render_error_response(payload: ErrorPayload, accept: str | None) -> Response:
    """Render ``payload`` as JSON or as an empty body with error headers."""
    response_type = RestApiResponseType.detect_by_accepted(accept)
    status_code = payload.status or int(HTTPStatus.INTERNAL_SERVER_ERROR)
    if response_type is RestApiResponseType.JSON:
        return JSONResponse(
            payload.to_json_dict(),
            status_code=status_code,
            media_type=response_type.content_type,
        )
    return Response(
        status_code=status_code,
        headers=payload_to_headers(payload),
        media_type=response_type.content_type,
    )


def install_exception_handlers(
    app: FastAPI,
    mapper: RestApiErrorMapper,
    *,
    id_provider: IdProvider | None = None,
) -> None:
    """Register handlers mapping errors on API paths into REST error payloads.

    ``id_provider`` may supply an error id per request, for example a
    correlation id, overriding the id generated for server errors.
    """

    async def _reraise(request: Request, exc: Exception) -> Response:
        del request
        raise exc

    async def _unhandled(request: Request, exc: Exception) -> Response:
        del request, exc
        return PlainTextResponse(
            HTTPStatus.INTERNAL_SERVER_ERROR.phrase,
            status_code=int(HTTPStatus.INTERNAL_SERVER_ERROR),
        )

    def _handler(
        fallback: _Fallback,
        default_status: Callable[[Any], int | None],
    ) -> Callable[[Request, Any], Awaitable[Response]]:
        async def _handle(request: Request, exc: Any) -> Response:
            path = request.url.path
            if not is_responsible(mapper.api_paths, path):
                return await fallback(request, exc)

            payload = mapper.build(
                exc,
                request_path=path,
                handler=request.scope.get("endpoint"),
                default_status=default_status(exc),
            )
            if id_provider is not None:
                error_id = id_provider(request)
                if error_id:
                    payload = payload.model_copy(update={"id": error_id})

            _log_error(payload, exc)
            response = render_error_response(payload, request.headers.get("accept"))
            if isinstance(exc, StarletteHTTPException) and exc.headers:
                response.headers.update(exc.headers)
            return response

        return _handle

    app.add_exception_handler(
        StarletteHTTPException,
        _handler(http_exception_handler, lambda exc: exc.status_code),
    )
    app.add_exception_handler(
        RequestValidationError,
        _handler(
            request_validation_exception_handler,
            lambda exc: int(HTTPStatus.UNPROCESSABLE_ENTITY),
        ),
    )
    # Classes registered here are handled by the exception middleware, so
    # their responses pass through user middleware. Only unmapped errors reach
    # the server error handler, which re-raises after responding.
    mapped = [ServiceError, RestApiResponseError, *mapped_exception_classes(mapper.settings)]
    for error_type in mapped:
        app.add_exception_handler(error_type, _handler(_reraise, lambda exc: None))
    app.add_exception_handler(Exception, _handler(_unhandled, lambda exc: None))


def _log_error(payload: ErrorPayload, exc: BaseException) -> None:
    with log_context(error_context(payload)):
        if (payload.status or 500) >= 500:
            _LOGGER.error(
                "Request failed with a server error",
                exc_info=exc,
                extra={PAYLOAD_ATTRIBUTE: payload},
            )
        else:
            _LOGGER.warning(
                "Request rejected: %s", payload.message, extra={PAYLOAD_ATTRIBUTE: payload}
            )


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate an Ant-style path pattern into a regular expression."""
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("/**", index):
            # "/**" also matches the bare prefix, e.g. "/api" for "/api/**".
            parts.append("(?:/.*)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif pattern[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return re.compile("".join(parts))
