"""Per-task logging context for error correlation.

The context is an immutable mapping held in a ``ContextVar``, so values bound
while handling one request never leak into concurrent requests. Values are
stored as strings and ``None`` values are never bound.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from ..model import ErrorPayload
from . import fields

_EMPTY: Mapping[str, str] = MappingProxyType({})
_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("rest_errors_log_context", default=_EMPTY)


def _apply(values: Mapping[str, object] = _EMPTY, drop: Iterable[str] = ()) -> None:
    dropped = set(drop)
    updated = {key: value for key, value in _CONTEXT.get().items() if key not in dropped}
    updated.update({str(key): str(value) for key, value in values.items() if value is not None})
    _CONTEXT.set(MappingProxyType(updated))


def get_context() -> dict[str, str]:
    """Return a copy of the current logging context."""
    return dict(_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind ``values`` into the current context, skipping ``None`` values."""
    _apply(values)


def clear_context(*keys: str) -> None:
    """Remove ``keys`` from the context, or everything when none are given."""
    if keys:
        _apply(drop=keys)
    else:
        _CONTEXT.set(_EMPTY)


@contextmanager
def log_context(values: Mapping[str, object] = _EMPTY, /, **extra: object) -> Iterator[None]:
    """Bind ``values`` and ``extra`` until the block exits."""
    token = _CONTEXT.set(_CONTEXT.get())
    try:
        _apply({**values, **extra})
        yield
    finally:
        _CONTEXT.reset(token)


def error_context(payload: ErrorPayload) -> dict[str, object]:
    """Return the correlation fields of one mapped error payload."""
    return {
        fields.ERROR_ID: payload.id,
        fields.STATUS: payload.status,
        fields.ERROR_CODE: payload.error_code,
        fields.PATH: payload.path,
    }
