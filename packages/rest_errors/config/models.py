"""Typed configuration models for REST error mapping."""

from __future__ import annotations

from http import HTTPStatus
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "rest_errors" / "rest_errors.yml"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "rest_errors"
    environment: str = "dev"


class ExceptionMapping(BaseModel):
    """Status, message and code applied to exceptions matching one class name."""

    exception_class_name: str
    status: int = int(HTTPStatus.INTERNAL_SERVER_ERROR)
    message: str | None = None
    code: str | None = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, value: int) -> int:
        """Reject codes outside the standard HTTP status registry."""
        try:
            HTTPStatus(value)
        except ValueError as exc:
            raise ValueError(f"unknown HTTP status code: {value}") from exc
        return value


class ExceptionMappingConfig(BaseModel):
    """Which payload fields are rendered for exceptions matching one class name."""

    exception_class_name: str | None = None
    include_message: bool = True
    include_exception_class_name: bool = True
    include_application_name: bool = True
    include_path: bool = True
    include_handler: bool = False
    include_stack_trace: bool = False
    include_cause: bool = True


def _mapping(exc_type: type[BaseException], status: HTTPStatus) -> ExceptionMapping:
    return ExceptionMapping(
        exception_class_name=f"{exc_type.__module__}.{exc_type.__qualname__}",
        status=int(status),
        message=status.phrase,
    )


def _default_exception_mappings() -> list[ExceptionMapping]:
    return [
        _mapping(ValueError, HTTPStatus.BAD_REQUEST),
        _mapping(PermissionError, HTTPStatus.FORBIDDEN),
        _mapping(KeyError, HTTPStatus.NOT_FOUND),
        _mapping(NotImplementedError, HTTPStatus.NOT_IMPLEMENTED),
        _mapping(ConnectionError, HTTPStatus.SERVICE_UNAVAILABLE),
        _mapping(TimeoutError, HTTPStatus.GATEWAY_TIMEOUT),
    ]


class MapperSettings(BaseModel):
    """Exception mapper configuration under the ``mapper`` key."""

    api_paths: list[str] = Field(default_factory=list)
    default_exception_mapping: ExceptionMapping = Field(
        default_factory=lambda: ExceptionMapping(
            exception_class_name="*",
            status=int(HTTPStatus.INTERNAL_SERVER_ERROR),
            message=HTTPStatus.INTERNAL_SERVER_ERROR.phrase,
        )
    )
    exception_mappings: list[ExceptionMapping] = Field(
        default_factory=_default_exception_mappings
    )
    default_exception_mapping_config: ExceptionMappingConfig = Field(
        default_factory=ExceptionMappingConfig
    )
    exception_mapping_configs: list[ExceptionMappingConfig] = Field(default_factory=list)


class RestErrorsSettings(BaseModel):
    """Root runtime settings resolved from cli/env/yaml/defaults sources."""

    application_name: str = "application"
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    mapper: MapperSettings = Field(default_factory=MapperSettings)
