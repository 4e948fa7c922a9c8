"""Exception hierarchy translated into HTTP error envelopes by the app."""

from __future__ import annotations

from typing import Any


class ScoreboardError(Exception):
    status_code = 500
    error_type = "Internal Server Error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ScoreboardError):
    status_code = 400
    error_type = "Bad Request"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class NotFoundError(ScoreboardError):
    status_code = 404
    error_type = "Not Found"


class ConflictError(ScoreboardError):
    status_code = 409
    error_type = "Conflict"


class ServiceError(ScoreboardError):
    """Wraps an unexpected repository/database failure."""


class ConfigurationError(ScoreboardError):
    pass


class UnavailableError(ScoreboardError):
    status_code = 503
    error_type = "Service Unavailable"
