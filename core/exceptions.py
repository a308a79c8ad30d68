"""
Custom exception classes for the application.

All exceptions inherit from AppException and include:
- error_code: Machine-readable error code for i18n
- message: Human-readable error message
- status_code: HTTP status code to return
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors."""

    error_code: str = "internal_error"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class AuthenticationError(AppException):
    """Raised when authentication fails."""

    error_code = "authentication_failed"
    message = "Authentication failed"
    status_code = 401


class NotFoundError(AppException):
    """Raised when a resource is not found."""

    error_code = "not_found"
    message = "Resource not found"
    status_code = 404


class ValidationError(AppException):
    """Raised when input validation fails."""

    error_code = "validation_error"
    message = "Invalid input"
    status_code = 422


class ExternalServiceError(AppException):
    """Raised when an external service fails."""

    error_code = "external_service_error"
    message = "External service unavailable"
    status_code = 503


class ContentFetchError(ExternalServiceError):
    """
    Raised when content or uploader identities cannot be fetched.

    Always covers the whole request; callers never receive a partial list.
    """

    error_code = "content_fetch_failed"
    message = "Failed to load content"


class MutationError(ExternalServiceError):
    """Raised when a favorites or download-count write is rejected."""

    error_code = "mutation_failed"
    message = "Failed to save changes"


class ContentNotFoundError(NotFoundError):
    """Raised when a content item is not in the working set."""

    error_code = "content_not_found"
    message = "Content not found"
