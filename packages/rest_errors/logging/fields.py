"""Canonical logging field names.

Keeping names centralized prevents drift between the mapper, the HTTP
adapters and the formatter.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
ERROR = "error"
EXCEPTION = "exception"

# Service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"

# Error mapping fields.
ERROR_ID = "error_id"
ERROR_CODE = "error_code"
STATUS = "status"
PATH = "path"
METHOD = "method"
URL = "url"
