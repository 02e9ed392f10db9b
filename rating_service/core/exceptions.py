"""Error kinds raised by the rating core and translated at the HTTP boundary."""
from http import HTTPStatus
from typing import Any, Dict, Optional


class RatingError(Exception):
    """Base exception for rating errors.

    Attributes:
        message: Error message
        status_code: HTTP status the boundary maps this error to
        code: Application error code
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConfigurationError(RatingError):
    """Invalid rating configuration or an attribute that cannot be resolved."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=HTTPStatus.BAD_REQUEST,
            code="CONFIGURATION_ERROR",
            details=details,
        )


class StorageError(RatingError):
    """Backend unreachable or a write failed. Never retried locally."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            code="STORAGE_ERROR",
            details=details,
        )


class ValidationError(RatingError):
    """A vote request is missing required fields or carries malformed values."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            status_code=HTTPStatus.BAD_REQUEST,
            code="VALIDATION_ERROR",
            details=details,
        )
