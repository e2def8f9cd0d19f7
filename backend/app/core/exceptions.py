"""
Domain error taxonomy.

Services raise these instead of HTTPException so the same pipeline can be
driven from tests, scripts, or the API. The handlers registered in
app.main translate each one into a `{message, details?}` payload with the
status code declared on the class, which lets a client tell "fix your input"
(4xx) apart from "try again later" (5xx).
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, str]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload: dict = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    """Malformed or missing input. `details` maps every offending field to a message."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, details: dict[str, str], message: Optional[str] = None):
        super().__init__(message, details)


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class DanglingReferenceError(AppError):
    status_code = 404
    default_message = "Referenced resource does not exist"


class UpstreamError(AppError):
    status_code = 502
    default_message = "Image upload failed"


class UploadTimeoutError(UpstreamError):
    status_code = 504
    default_message = "Image upload timed out"


class DatabaseConnectionError(AppError):
    status_code = 503
    default_message = "Database configuration error"
