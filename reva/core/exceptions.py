"""
Custom exceptions for the REVA lead service.

This module defines a hierarchical exception system with:
- Machine-readable error codes for API responses
- Retryable flag for transient vs permanent failures
- Structured error data for logging and debugging

Design pattern: Base exception → Specific exceptions
- ExternalAPIError: Base for all third-party API errors (Places, PDL)
- Specific exceptions inherit from base with predefined error codes
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standardized error codes for API responses.

    Naming convention: <DOMAIN>_<NUMBER>
    - AUTH_xxx: Authentication errors
    - LEAD_xxx: Lead-related errors
    - API_xxx: General external API errors
    - PLACES_xxx: Google Places errors
    """

    # Authentication errors
    AUTHENTICATION_FAILED = "AUTH_001"

    # Lead errors
    LEAD_NOT_FOUND = "LEAD_001"
    INVALID_LEAD_DATA = "LEAD_002"

    # API errors
    EXTERNAL_API_ERROR = "API_001"
    REQUEST_TIMEOUT = "API_002"
    RATE_LIMIT_EXCEEDED = "API_003"
    INVALID_RESPONSE = "API_004"
    CONNECTION_ERROR = "API_005"

    # Places errors
    PLACES_SEARCH_FAILED = "PLACES_001"


class ExternalAPIError(Exception):
    """
    Base exception for all third-party API errors.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status code (if applicable)
        error_code: Machine-readable error identifier
        details: Additional context (dict, can include API response)
        retryable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: ErrorCode = ErrorCode.EXTERNAL_API_ERROR,
        details: Any = None,
        retryable: bool = False
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        self.retryable = retryable
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            dict: Structured error data suitable for JSON responses
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
            "retryable": self.retryable
        }

    def __str__(self) -> str:
        """String representation for logging."""
        return f"{self.error_code.value}: {self.message}"


class AuthenticationError(ExternalAPIError):
    """
    Raised when a third-party API rejects our credentials.

    Non-retryable as credentials won't change on retry.

    HTTP Status: 401 Unauthorized
    """

    def __init__(self, message: str = "Authentication failed", details: Any = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code=ErrorCode.AUTHENTICATION_FAILED,
            details=details,
            retryable=False
        )


class RateLimitError(ExternalAPIError):
    """
    Raised when a third-party rate limit is exceeded.

    Retryable - the client backs off exponentially.

    HTTP Status: 429 Too Many Requests
    """

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int | None = None):
        super().__init__(
            message=message,
            status_code=429,
            error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
            details={"retry_after": retry_after},
            retryable=True
        )


class RequestTimeoutError(ExternalAPIError):
    """
    Raised when a third-party request times out.

    HTTP Status: 504 Gateway Timeout
    """

    def __init__(self, message: str = "Request timeout", timeout: float | None = None):
        super().__init__(
            message=message,
            status_code=504,
            error_code=ErrorCode.REQUEST_TIMEOUT,
            details={"timeout_seconds": timeout},
            retryable=True
        )


class PlacesAPIError(ExternalAPIError):
    """Raised when Google Places returns an unusable status."""

    def __init__(self, message: str, status: str | None = None):
        super().__init__(
            message=message,
            status_code=502,
            error_code=ErrorCode.PLACES_SEARCH_FAILED,
            details={"places_status": status},
            retryable=False
        )


class LeadNotFoundError(Exception):
    """
    Raised when a persisted lead cannot be found.

    HTTP Status: 404 Not Found
    """

    def __init__(self, lead_id: int, message: str = "Lead not found"):
        self.lead_id = lead_id
        self.message = message
        self.error_code = ErrorCode.LEAD_NOT_FOUND
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": {"id": self.lead_id}
        }
