"""Default error codes used by the service error factories.

An error code is the machine-readable counterpart of the HTTP status. It is
sent as ``errorCode`` in JSON bodies and as ``X-ERROR-CODE`` in headers.
Applications may pass their own codes to any factory.
"""

VALIDATION_ERROR = "VALIDATION_ERROR"  # 400
UNAUTHENTICATED = "UNAUTHENTICATED"  # 401
PERMISSION_DENIED = "PERMISSION_DENIED"  # 403
NOT_FOUND = "NOT_FOUND"  # 404
CONFLICT = "CONFLICT"  # 409
RATE_LIMITED = "RATE_LIMITED"  # 429
INTERNAL_ERROR = "INTERNAL_ERROR"  # 500
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"  # 503
