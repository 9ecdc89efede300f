"""Settings loading with deterministic precedence.

Layers are applied lowest first, later layers win:
1) Built-in defaults
2) YAML file (``REST_ERRORS_CONFIG`` or ~/.config/rest_errors/rest_errors.yml)
3) Environment variables
4) CLI params

Environment variables use the ``REST_ERRORS_`` prefix and ``__`` between
nested keys, for example ``REST_ERRORS_MAPPER__API_PATHS='["/api/**"]'``.
CLI params may be nested mappings or dotted keys such as
``{"logging.level": "DEBUG"}``.
"""

from __future__ import annotations

import copy
import logging
import os
from functools import reduce
from pathlib import Path
from typing import Any, Mapping

import yaml

from .defaults import BUILTIN_DEFAULTS
from .models import DEFAULT_CONFIG_PATH, RestErrorsSettings

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "REST_ERRORS_"
CONFIG_PATH_ENV = f"{ENV_PREFIX}CONFIG"

_Layer = tuple[str, dict[str, Any]]


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> RestErrorsSettings:
    """Return validated settings built from every configuration layer."""
    return RestErrorsSettings.model_validate(
        load_config(cli_params=cli_params, environ=environ, config_path=config_path)
    )


def load_config(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
    defaults: Mapping[str, Any] | None = None,
    env_prefix: str = ENV_PREFIX,
) -> dict[str, Any]:
    """Return the raw merged configuration mapping, before validation."""
    env = os.environ if environ is None else environ
    layers: list[_Layer] = [
        ("defaults", _expand(BUILTIN_DEFAULTS if defaults is None else defaults)),
        ("file", _file_layer(_config_file(config_path, env))),
        ("environment", _env_layer(env, env_prefix)),
        ("cli", _expand(cli_params or {})),
    ]
    for name, data in layers:
        if data:
            _LOGGER.debug("Applying %s configuration layer: %s", name, sorted(data))
    return reduce(_merge, (data for _, data in layers), {})


def _config_file(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path is not None:
        return Path(config_path)
    from_env = env.get(CONFIG_PATH_ENV, "").strip()
    return Path(from_env).expanduser() if from_env else DEFAULT_CONFIG_PATH


def _file_layer(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        parsed = yaml.safe_load(handle)
    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ValueError(f"Config file must contain a top-level mapping: {path}")
    return _expand(parsed)


def _env_layer(env: Mapping[str, str], prefix: str) -> dict[str, Any]:
    output: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(prefix) or key == CONFIG_PATH_ENV:
            continue
        path = [part.strip().lower() for part in key[len(prefix) :].split("__")]
        path = [part for part in path if part]
        if path:
            _assign(output, path, _coerce(raw))
    return output


def _expand(data: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-copy ``data`` into plain dicts, splitting dotted keys into levels."""
    output: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = _expand(value)
        else:
            value = copy.deepcopy(value)
        path = [part for part in str(key).split(".") if part]
        if path:
            _assign(output, path, value)
    return output


def _assign(target: dict[str, Any], path: list[str], value: Any) -> None:
    for part in path[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = target[part] = {}
        target = child
    leaf = path[-1]
    if isinstance(value, dict) and isinstance(target.get(leaf), dict):
        value = _merge(target[leaf], value)
    target[leaf] = value


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge mappings recursively; lists and scalars in ``override`` replace."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = _merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _coerce(raw: str) -> Any:
    """Read an environment value as a YAML scalar or flow collection."""
    value = raw.strip()
    if not value:
        return raw
    if value.lower() == "none":
        return None
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return raw
    if parsed is None or isinstance(parsed, (bool, int, float, list, dict)):
        return parsed
    return raw
