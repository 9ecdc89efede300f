"""Map raised exceptions into REST error payloads."""

from __future__ import annotations

import inspect
import traceback
import uuid
from datetime import UTC, datetime
from http import HTTPStatus
from types import TracebackType
from typing import Any, Callable

from .config.models import ExceptionMappingConfig, MapperSettings, RestErrorsSettings
from .constants import NO_ERROR_CODE_VALUE
from .errors import RestApiResponseError, ServiceError
from .logging import get_logger
from .mapping import cause_of, class_name_of, find_exception_mapping, find_exception_mapping_config
from .model import ErrorPayload, HandlerInfo, StackTraceItem
from .status import detect_http_status, resolve_status

_LOGGER = get_logger(__name__)


class RestApiErrorMapper:
    """Build ``ErrorPayload`` values from exceptions using configured mappings."""

    def __init__(
        self,
        *,
        settings: MapperSettings | None = None,
        application_name: str,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or MapperSettings()
        self._application_name = application_name
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def settings(self) -> MapperSettings:
        """Return the mapper settings."""
        return self._settings

    @property
    def application_name(self) -> str:
        """Return the application name written into payloads."""
        return self._application_name

    @property
    def api_paths(self) -> list[str]:
        """Return the path patterns this mapper is responsible for."""
        return list(self._settings.api_paths)

    def detect_http_status(
        self,
        exc: BaseException,
        default_status: int | HTTPStatus | None = None,
    ) -> HTTPStatus:
        """Return the status for ``exc``; the mapped status is the default."""
        if resolve_status(default_status) is None:
            default_status = find_exception_mapping(self._settings, exc).status
        return detect_http_status(exc, default_status)

    def build(
        self,
        exc: BaseException,
        *,
        request_path: str | None = None,
        handler: Callable[..., Any] | None = None,
        default_status: int | HTTPStatus | None = None,
    ) -> ErrorPayload:
        """Return the error payload describing ``exc``."""
        config = find_exception_mapping_config(self._settings, exc)
        status = self.detect_http_status(exc, default_status)

        fields: dict[str, Any] = {
            "id": self._id_factory() if status >= 500 else None,
            "timestamp": self._clock(),
            "status": int(status),
            "error": status.phrase,
        }
        fields.update(self._error_code(exc))
        fields.update(self._describe(exc, config))

        if config.include_application_name:
            fields["application"] = self._application_name
        if config.include_path and request_path is not None:
            fields["path"] = request_path
        if config.include_handler and handler is not None:
            fields["handler"] = _handler_info(handler)

        payload = ErrorPayload(**fields)
        if config.include_cause:
            payload = _with_cause(payload, self._cause(exc, config))
        _LOGGER.debug("Mapped %s to HTTP %d", class_name_of(exc), payload.status)
        return payload

    def _error_code(self, exc: BaseException) -> dict[str, Any]:
        code: str | None = None
        if isinstance(exc, ServiceError):
            code = exc.error_code
        if not code or not code.strip():
            code = find_exception_mapping(self._settings, exc).code
        if not code or not code.strip():
            return {}
        return {"error_code": code, "error_code_inherited": False}

    def _message(self, exc: BaseException) -> str | None:
        message = str(exc)
        if message.strip():
            return message
        return find_exception_mapping(self._settings, exc).message

    def _describe(self, exc: BaseException, config: ExceptionMappingConfig) -> dict[str, Any]:
        """Return the message, class name and stack trace fields for ``exc``."""
        fields: dict[str, Any] = {}
        if config.include_message:
            fields["message"] = self._message(exc)
        if config.include_exception_class_name:
            fields["class_name"] = class_name_of(exc)
        if config.include_stack_trace:
            fields["stack_trace"] = _stack_trace(exc.__traceback__)
        return fields

    def _cause(self, exc: BaseException, config: ExceptionMappingConfig) -> ErrorPayload | None:
        if isinstance(exc, RestApiResponseError):
            return _reconfigure(exc.payload, config)
        return self._cause_chain(cause_of(exc), config, seen={id(exc)})

    def _cause_chain(
        self,
        cause: BaseException | None,
        config: ExceptionMappingConfig,
        *,
        seen: set[int],
    ) -> ErrorPayload | None:
        if cause is None or id(cause) in seen:
            return None
        seen.add(id(cause))
        if isinstance(cause, RestApiResponseError):
            return _reconfigure(cause.payload, config)

        fields = self._error_code(cause)
        fields.update(self._describe(cause, config))
        payload = ErrorPayload(**fields)
        return _with_cause(payload, self._cause_chain(cause_of(cause), config, seen=seen))


def _with_cause(payload: ErrorPayload, cause: ErrorPayload | None) -> ErrorPayload:
    """Attach ``cause``; a cause error code replaces the outer one."""
    if cause is None:
        return payload
    update: dict[str, Any] = {"cause": cause}
    if _has_error_code(cause.error_code):
        update["error_code"] = cause.error_code
        update["error_code_inherited"] = True
    return payload.model_copy(update=update)


def _has_error_code(code: str | None) -> bool:
    return code is not None and bool(code.strip()) and code != NO_ERROR_CODE_VALUE


def _reconfigure(source: ErrorPayload, config: ExceptionMappingConfig) -> ErrorPayload:
    """Copy a received payload keeping only the fields ``config`` includes."""
    fields: dict[str, Any] = {
        "id": source.id,
        "timestamp": source.timestamp,
        "status": source.status,
        "error": source.error,
    }
    if _has_error_code(source.error_code):
        fields["error_code"] = source.error_code
        fields["error_code_inherited"] = source.error_code_inherited
    if config.include_message:
        fields["message"] = source.message
    if config.include_exception_class_name:
        fields["class_name"] = source.class_name
    if config.include_application_name:
        fields["application"] = source.application
    if config.include_path:
        fields["path"] = source.path
    if config.include_handler:
        fields["handler"] = source.handler
    if config.include_stack_trace:
        fields["stack_trace"] = source.stack_trace
    if config.include_cause and source.cause is not None:
        fields["cause"] = _reconfigure(source.cause, config)
    return ErrorPayload(**fields)


def _stack_trace(tb: TracebackType | None) -> list[StackTraceItem] | None:
    items = [
        StackTraceItem(
            declaring_class=frame.f_globals.get("__name__"),
            method_name=frame.f_code.co_name,
            file_name=frame.f_code.co_filename,
            line_number=lineno,
        )
        for frame, lineno in traceback.walk_tb(tb)
    ]
    return items or None


def _handler_info(handler: Callable[..., Any]) -> HandlerInfo:
    owner = getattr(handler, "__self__", None)
    if owner is not None:
        owner_type = owner if isinstance(owner, type) else type(owner)
        class_name = f"{owner_type.__module__}.{owner_type.__qualname__}"
    else:
        class_name = getattr(handler, "__module__", None)

    try:
        parameters = list(inspect.signature(handler).parameters.values())
    except (TypeError, ValueError):
        parameters = []

    return HandlerInfo(
        class_name=class_name,
        method_name=getattr(handler, "__name__", type(handler).__name__),
        method_parameter_types=[_annotation_name(param.annotation) for param in parameters],
    )


def _annotation_name(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return "object"
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, type):
        return f"{annotation.__module__}.{annotation.__qualname__}"
    return str(annotation)


def build_mapper(settings: RestErrorsSettings) -> RestApiErrorMapper:
    """Create a mapper wired from root runtime settings."""
    return RestApiErrorMapper(
        settings=settings.mapper,
        application_name=settings.application_name,
    )
