"""Public logging API.

This package wraps Python's ``logging`` module with stdout defaults and
``contextvars``-based structured context.
"""

from .config import (
    PAYLOAD_ATTRIBUTE,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from .context import bind_context, clear_context, error_context, get_context, log_context

__all__ = [
    "PAYLOAD_ATTRIBUTE",
    "bind_context",
    "clear_context",
    "configure_logging",
    "configure_logging_from_settings",
    "error_context",
    "get_context",
    "get_logger",
    "log_context",
]
