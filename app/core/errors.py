from __future__ import annotations

from typing import Any

from app.models.enums import ErrorKind


class AppError(Exception):
    """Base for failures rendered as the ``{"error", "details"}`` envelope."""

    status_code: int = 500
    kind: ErrorKind = ErrorKind.INTERNAL
    default_error: str = "Internal server error"

    def __init__(self, error: str | None = None, details: str | dict[str, Any] | None = None) -> None:
        self.error = error or self.default_error
        self.details = details
        super().__init__(self.error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(AppError):
    status_code = 400
    kind = ErrorKind.VALIDATION
    default_error = "Validation failed"


class NotFoundError(AppError):
    status_code = 404
    kind = ErrorKind.NOT_FOUND
    default_error = "Not found"


class ExternalSourceUnavailable(AppError):
    status_code = 503
    kind = ErrorKind.EXTERNAL_UNAVAILABLE
    default_error = "External data source unavailable"

    def __init__(self, source: str, details: str | None = None) -> None:
        self.source = source
        super().__init__(details=details or f"Could not fetch data from {source}")


class InternalError(AppError):
    status_code = 500
    kind = ErrorKind.INTERNAL
