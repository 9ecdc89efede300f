"""Public API for REST error mapping configuration."""

from .loader import load_config, load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    ExceptionMapping,
    ExceptionMappingConfig,
    LoggingSettings,
    MapperSettings,
    RestErrorsSettings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ExceptionMapping",
    "ExceptionMappingConfig",
    "LoggingSettings",
    "MapperSettings",
    "RestErrorsSettings",
    "load_config",
    "load_settings",
]
