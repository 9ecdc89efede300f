"""Exception class-name matching against configured mappings.

Class names are ``module.qualname`` strings such as ``builtins.ValueError``.
A name ending in ``.*`` matches every class whose qualified name starts with
the prefix before the ``*``. A rule applies when any class in the exception's
MRO matches, or when the rule applies to its explicit ``raise ... from`` cause.
"""

from __future__ import annotations

import sys

from .config.models import ExceptionMapping, ExceptionMappingConfig, MapperSettings


def class_name_of(value: BaseException | type[BaseException]) -> str:
    """Return the qualified class name of an exception or exception type."""
    cls = value if isinstance(value, type) else type(value)
    return f"{cls.__module__}.{cls.__qualname__}"


def cause_of(exc: BaseException) -> BaseException | None:
    """Return the explicit cause, else the implicit context unless suppressed."""
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def matches_class_name(exc: BaseException | None, exception_class_name: str | None) -> bool:
    """Return ``True`` when ``exc`` or one of its causes matches the name."""
    if exc is None or not exception_class_name:
        return False
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if any(_name_matches(class_name_of(cls), exception_class_name) for cls in _exception_mro(current)):
            return True
        current = current.__cause__
    return False


def find_exception_mapping(settings: MapperSettings, exc: BaseException) -> ExceptionMapping:
    """Return the first matching exception mapping or the default mapping."""
    for mapping in settings.exception_mappings:
        if matches_class_name(exc, mapping.exception_class_name):
            return mapping
    return settings.default_exception_mapping


def find_exception_mapping_config(
    settings: MapperSettings,
    exc: BaseException,
) -> ExceptionMappingConfig:
    """Return the first matching payload config or the default config."""
    for config in settings.exception_mapping_configs:
        if matches_class_name(exc, config.exception_class_name):
            return config
    return settings.default_exception_mapping_config


def resolve_exception_class(exception_class_name: str) -> type[BaseException] | None:
    """Return the exception class named ``module.qualname``, if already loaded.

    Wildcard names, unloaded modules and non-exception attributes resolve to
    ``None``. Modules are looked up in ``sys.modules`` and never imported.
    """
    module_name, _, qualname = exception_class_name.rpartition(".")
    if not module_name or qualname == "*":
        return None
    candidate = getattr(sys.modules.get(module_name), qualname, None)
    if isinstance(candidate, type) and issubclass(candidate, BaseException):
        return candidate
    return None


def mapped_exception_classes(settings: MapperSettings) -> list[type[BaseException]]:
    """Return the loaded exception classes named by ``exception_mappings``."""
    classes: list[type[BaseException]] = []
    for mapping in settings.exception_mappings:
        cls = resolve_exception_class(mapping.exception_class_name)
        if cls is not None and cls not in classes:
            classes.append(cls)
    return classes


def _exception_mro(exc: BaseException) -> list[type]:
    return [cls for cls in type(exc).__mro__ if issubclass(cls, BaseException)]


def _name_matches(class_name: str, pattern: str) -> bool:
    if class_name == pattern:
        return True
    if pattern.endswith(".*"):
        return class_name.startswith(pattern[:-1])
    return False
