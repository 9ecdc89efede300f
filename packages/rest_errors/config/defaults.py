"""Built-in default configuration values.

These defaults are the final fallback in the configuration cascade:
CLI params > ENV vars > config file > built-in defaults. Mapper defaults are
declared on the models themselves so exception mapping lists are not merged
key by key.
"""

from __future__ import annotations

from typing import Any

BUILTIN_DEFAULTS: dict[str, Any] = {
    "application_name": "application",
    "logging": {
        "level": "INFO",
        "json_output": True,
        "service": "rest_errors",
        "environment": "dev",
    },
}
