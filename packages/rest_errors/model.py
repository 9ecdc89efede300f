"""Serialized REST API error payload.

The wire shape uses camelCase keys so payloads interoperate with services that
speak the same error contract. Unknown keys are ignored on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class HandlerInfo(BaseModel):
    """Request handler that was executing when the error was raised."""

    model_config = _MODEL_CONFIG

    class_name: str | None = None
    method_name: str | None = None
    method_parameter_types: list[str] = Field(default_factory=list)


class StackTraceItem(BaseModel):
    """One traceback frame."""

    model_config = _MODEL_CONFIG

    declaring_class: str | None = None
    method_name: str | None = None
    file_name: str | None = None
    line_number: int | None = None


class ErrorPayload(BaseModel):
    """Standardized REST error body, also mirrored into response headers."""

    model_config = _MODEL_CONFIG

    id: str | None = None
    timestamp: datetime | None = None
    status: int | None = None
    error: str | None = None
    message: str | None = None
    error_code: str | None = None
    error_code_inherited: bool = False
    class_name: str | None = None
    application: str | None = None
    path: str | None = None
    handler: HandlerInfo | None = None
    stack_trace: list[StackTraceItem] | None = None
    cause: ErrorPayload | None = None

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase wire representation without empty values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
