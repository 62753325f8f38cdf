# Overview: Error taxonomy shared by services and routes.

"""
API error hierarchy.

Services raise these; the request boundary turns them into the JSON
envelope. ``kind`` is the stable machine-readable code clients and tests
match on, ``message`` is the human-readable text.
"""


class ApiError(Exception):
    """Base class for every error that maps to an HTTP response."""

    kind = "internal"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(ApiError):
    """400-level input problem (missing/malformed field)."""
    kind = "validation"
    status_code = 400
    default_message = "Invalid request"


class TooShortError(ValidationError):
    kind = "too_short"


class TooLongError(ValidationError):
    kind = "too_long"


class ForbiddenError(ApiError):
    """Wrong admin code. Reported as 400 like the other input errors."""
    kind = "forbidden"
    status_code = 400
    default_message = "Invalid admin code"


class InvalidCredentialsError(ApiError):
    # Same message for unknown user and wrong password
    kind = "invalid_credentials"
    status_code = 401
    default_message = "Invalid username or password"


class ConflictError(ApiError):
    kind = "conflict"
    status_code = 400
    default_message = "Resource already exists"


class NotFoundError(ApiError):
    """Missing resource or failed ownership check (never 403)."""
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class MethodNotAllowedError(ApiError):
    kind = "method_not_allowed"
    status_code = 405
    default_message = "Method not allowed"


class PayloadTooLargeError(ApiError):
    kind = "payload_too_large"
    status_code = 400
    default_message = "Payload too large"


class UnauthenticatedError(ApiError):
    kind = "unauthenticated"
    status_code = 401
    default_message = "Invalid or expired session"


class InternalError(ApiError):
    pass
