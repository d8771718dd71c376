"""Custom exception classes for the Researcher Portal.

All exceptions follow the portal error format:
{
    "error": {
        "code": "ERROR_CODE",
        "message": "Human-readable message",
        "details": {}  # optional
    }
}

Error messages never carry raw database errors; those are logged server side.
"""

from __future__ import annotations

from typing import Any


class PortalError(Exception):
    """Base exception for the Researcher Portal."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class UnauthorizedError(PortalError):
    """No authenticated researcher for this request."""

    def __init__(self) -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message="Unauthorized",
            status_code=401,
        )


class RecordNotFoundError(PortalError):
    """Record missing or owned by another researcher.

    Both cases share one message so ownership is never disclosed.
    """

    def __init__(self) -> None:
        super().__init__(
            code="RECORD_NOT_FOUND",
            message="Record not found or not yours",
            status_code=404,
        )


class ActivityTypeNotFoundError(PortalError):
    """Unknown activity type slug."""

    def __init__(self, activity_type: str) -> None:
        super().__init__(
            code="ACTIVITY_TYPE_NOT_FOUND",
            message=f"Unknown activity type: {activity_type}",
            status_code=404,
        )


class PersistenceError(PortalError):
    """Database write or read failed."""

    def __init__(self, message: str = "Operation failed") -> None:
        super().__init__(
            code="PERSISTENCE_ERROR",
            message=message,
            status_code=500,
        )


class ValidationError(PortalError):
    """Input validation error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=422,
            details=details,
        )
