"""Wire-level names for REST API error metadata.

Header names are fixed process-wide and never vary by configuration. HTTP
treats them case-insensitively; the canonical spelling here is upper case.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

ID_HEADER_NAME = "X-ERROR-ID"
TIMESTAMP_HEADER_NAME = "X-ERROR-TIMESTAMP"
CODE_HEADER_NAME = "X-ERROR-CODE"
CODE_INHERITED_HEADER_NAME = "X-ERROR-CODE-INHERITED"
MESSAGE_HEADER_NAME = "X-ERROR-MESSAGE"
EXCEPTION_HEADER_NAME = "X-ERROR-EXCEPTION"
APPLICATION_HEADER_NAME = "X-ERROR-APPLICATION"
PATH_HEADER_NAME = "X-ERROR-PATH"

# RFC 1123 date-time, always rendered in GMT.
TIMESTAMP_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"

NO_ID_VALUE = "UNSPECIFIED"
NO_ERROR_CODE_VALUE = "UNSPECIFIED"
NO_CLASS_VALUE = "UNSPECIFIED"
NO_MESSAGE_VALUE = "No message present."


class ErrorField(str, Enum):
    """Logical error attributes transported as response headers."""

    ID = "id"
    TIMESTAMP = "timestamp"
    ERROR_CODE = "errorCode"
    ERROR_CODE_INHERITED = "errorCodeInherited"
    MESSAGE = "message"
    EXCEPTION_CLASS_NAME = "exceptionClassName"
    APPLICATION = "application"
    PATH = "path"


HEADER_NAMES: Mapping[ErrorField, str] = MappingProxyType(
    {
        ErrorField.ID: ID_HEADER_NAME,
        ErrorField.TIMESTAMP: TIMESTAMP_HEADER_NAME,
        ErrorField.ERROR_CODE: CODE_HEADER_NAME,
        ErrorField.ERROR_CODE_INHERITED: CODE_INHERITED_HEADER_NAME,
        ErrorField.MESSAGE: MESSAGE_HEADER_NAME,
        ErrorField.EXCEPTION_CLASS_NAME: EXCEPTION_HEADER_NAME,
        ErrorField.APPLICATION: APPLICATION_HEADER_NAME,
        ErrorField.PATH: PATH_HEADER_NAME,
    }
)


def header_name(field: ErrorField | str) -> str:
    """Return the header name for one error field.

    Plain strings are accepted when they equal an ``ErrorField`` value; any
    other value raises ``ValueError``.
    """
    return HEADER_NAMES[ErrorField(field)]
