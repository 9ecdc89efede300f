"""Unit tests for exception class-name mapping rules."""

from __future__ import annotations

from packages.rest_errors.config import ExceptionMapping, ExceptionMappingConfig, MapperSettings
from packages.rest_errors.mapping import (
    cause_of,
    class_name_of,
    find_exception_mapping,
    find_exception_mapping_config,
    mapped_exception_classes,
    matches_class_name,
    resolve_exception_class,
)


class _InventoryError(LookupError):
    pass


def _raise_from(outer: BaseException, inner: BaseException) -> BaseException:
    try:
        try:
            raise inner
        except BaseException as exc:
            raise outer from exc
    except BaseException as exc:
        return exc


def test_class_name_uses_module_and_qualname() -> None:
    """class_name_of should return the qualified name for values and types."""
    assert class_name_of(ValueError("x")) == "builtins.ValueError"
    assert class_name_of(_InventoryError) == f"{__name__}._InventoryError"


def test_matches_exact_name_through_mro() -> None:
    """A rule for a base class should match subclasses."""
    assert matches_class_name(_InventoryError(), "builtins.LookupError")
    assert not matches_class_name(_InventoryError(), "builtins.ValueError")


def test_matches_package_wildcard() -> None:
    """A ``pkg.*`` rule should match classes declared under that prefix."""
    module_prefix = __name__.rsplit(".", 1)[0]

    assert matches_class_name(_InventoryError(), f"{module_prefix}.*")
    assert not matches_class_name(_InventoryError(), "other.package.*")


def test_matches_explicit_cause_only() -> None:
    """Rules should follow ``raise ... from`` but not implicit context."""
    chained = _raise_from(RuntimeError("outer"), KeyError("inner"))
    assert matches_class_name(chained, "builtins.KeyError")

    try:
        try:
            raise KeyError("inner")
        except KeyError:
            raise RuntimeError("while handling")
    except RuntimeError as exc:
        implicit = exc

    assert not matches_class_name(implicit, "builtins.KeyError")
    assert isinstance(cause_of(implicit), KeyError)


def test_cause_of_respects_suppressed_context() -> None:
    """cause_of should return None when context was suppressed."""
    try:
        try:
            raise KeyError("inner")
        except KeyError:
            raise RuntimeError("clean") from None
    except RuntimeError as exc:
        assert cause_of(exc) is None


def test_find_exception_mapping_returns_first_match_or_default() -> None:
    """Mapping lookup should honour list order and fall back to the default."""
    settings = MapperSettings(
        exception_mappings=[
            ExceptionMapping(exception_class_name="builtins.LookupError", status=404, code="MISSING"),
            ExceptionMapping(exception_class_name="builtins.KeyError", status=400),
        ]
    )

    assert find_exception_mapping(settings, KeyError("k")).code == "MISSING"
    assert find_exception_mapping(settings, RuntimeError()) == settings.default_exception_mapping
    assert settings.default_exception_mapping.status == 500


def test_default_mappings_cover_common_builtins() -> None:
    """Built-in mappings should translate common Python errors."""
    settings = MapperSettings()

    assert find_exception_mapping(settings, ValueError()).status == 400
    assert find_exception_mapping(settings, PermissionError()).status == 403
    assert find_exception_mapping(settings, KeyError()).status == 404
    assert find_exception_mapping(settings, TimeoutError()).status == 504


def test_find_exception_mapping_config_returns_first_match_or_default() -> None:
    """Config lookup should return the matching include flags."""
    verbose = ExceptionMappingConfig(
        exception_class_name="builtins.RuntimeError",
        include_stack_trace=True,
    )
    settings = MapperSettings(exception_mapping_configs=[verbose])

    assert find_exception_mapping_config(settings, RuntimeError()) is verbose
    assert find_exception_mapping_config(settings, ValueError()) is (
        settings.default_exception_mapping_config
    )


def test_resolve_exception_class_uses_loaded_modules() -> None:
    """Qualified names of loaded exception classes should resolve to the class."""
    assert resolve_exception_class("builtins.ValueError") is ValueError
    assert resolve_exception_class(class_name_of(_InventoryError)) is _InventoryError
    assert resolve_exception_class("builtins.*") is None
    assert resolve_exception_class("builtins.len") is None
    assert resolve_exception_class("not_loaded_module_xyz.Error") is None
    assert resolve_exception_class("ValueError") is None


def test_mapped_exception_classes_skip_unresolvable_names() -> None:
    """Only loaded, distinct exception classes should be returned."""
    settings = MapperSettings(
        exception_mappings=[
            ExceptionMapping(exception_class_name="builtins.KeyError", status=404),
            ExceptionMapping(exception_class_name="builtins.KeyError", status=410),
            ExceptionMapping(exception_class_name="missing_pkg.*", status=400),
        ]
    )

    assert mapped_exception_classes(settings) == [KeyError]
    assert mapped_exception_classes(MapperSettings()) == [
        ValueError,
        PermissionError,
        KeyError,
        NotImplementedError,
        ConnectionError,
        TimeoutError,
    ]
