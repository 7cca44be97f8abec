from __future__ import annotations

from typing import Any


class PortalError(Exception):
    """Base for errors that cross the HTTP boundary as an ``{error, message}`` body."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str, *, error: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class ConfigurationError(PortalError):
    """Raised when a required server secret or identifier is not configured."""

    status_code = 500
    error = "Server configuration error"


class ValidationError(PortalError):
    """Raised when client input fails schema validation."""

    status_code = 400
    error = "Invalid request"


class AuthError(PortalError):
    """Raised when the scheduling provider rejects our credentials."""

    status_code = 401
    error = "Authentication failed"


class NotFoundError(PortalError):
    status_code = 404
    error = "Not found"


class ConflictError(PortalError):
    """Raised when a time slot was taken between the read and the write."""

    status_code = 422
    error = "Time slot unavailable"


class UpstreamError(PortalError):
    """Raised for provider failures that carry no more specific meaning."""

    status_code = 500
    error = "Upstream request failed"


class RelayError(RuntimeError):
    """Normalized failure of a call to the scheduling provider."""

    def __init__(self, status_code: int, message: str, error: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error if error is not None else {"error": message}
