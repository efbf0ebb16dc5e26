"""
Error Handling Utilities
Error taxonomy for the cookie stores and the proof-of-clap admission check.
"""

from typing import Optional, Dict, Any
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for programmatic handling."""

    # Client errors (4xx)
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_COOKIE = "INVALID_COOKIE"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Internal errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    ILLEGAL_NAME = "ILLEGAL_NAME"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class BaseAPIException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status_code: int = 500,
        details: Optional[str] = None,
        suggestion: Optional[str] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.suggestion = suggestion
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for HTTP response."""
        return {
            "error": self.message,
            "code": self.code.value,
            "details": self.details,
            "suggestion": self.suggestion
        }


class BadRequestError(BaseAPIException):
    """Malformed request data (missing or oversized URL, bad body)."""

    def __init__(self, message: str = "The provided input is invalid.", details: Optional[str] = None):
        super().__init__(message, ErrorCode.INVALID_INPUT, status_code=400, details=details)


class NotFoundError(BaseAPIException):
    def __init__(self, message: str = "The requested resource was not found."):
        super().__init__(message, ErrorCode.NOT_FOUND, status_code=404)


class InvalidCookieError(BaseAPIException):
    """A cookie violates the name/value/domain rules and cannot be set."""

    def __init__(self, message: str = "The cookie is invalid."):
        super().__init__(message, ErrorCode.INVALID_COOKIE, status_code=400)


class IllegalNameError(BaseAPIException):
    """A cookie name collides with the reserved signature prefix."""

    def __init__(self, name: str):
        super().__init__(
            f"Illegal cookie name: {name!r}",
            ErrorCode.ILLEGAL_NAME,
            status_code=500,
        )
        self.name = name


class SignatureVerificationError(BaseAPIException):
    """
    A signed cookie did not match its signature.

    Every failure carries the same message, whether the value or the
    signature was altered.
    """

    def __init__(self):
        super().__init__(
            "Invalid cookie.",
            ErrorCode.FORBIDDEN,
            status_code=403,
            suggestion="Clear your cookies and sign in again."
        )


class DecryptionError(BaseAPIException):
    def __init__(self):
        super().__init__(
            ErrorMessages.INTERNAL_ERROR,
            ErrorCode.DECRYPTION_FAILED,
            status_code=500,
        )


class KeyDerivationError(BaseAPIException):
    """The cookie secret is missing or the derivation parameters are unusable."""

    def __init__(self, message: str = "Secret missing"):
        super().__init__(
            message,
            ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            suggestion="Set SECRET_KEY in the environment."
        )


class MalformedPoWInputError(BaseAPIException):
    """Proof-of-clap fields rejected before any hashing takes place."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_INPUT, status_code=400)


# Error Message Templates
class ErrorMessages:
    """User-friendly error message templates."""

    INTERNAL_ERROR = "An unexpected error occurred. Please try again."
    INVALID_INPUT = "The provided input is invalid."
    INVALID_NONCE = "Invalid nonce"
    MALFORMED_ID = "Malformed id. Needs to be UUID"
    MALFORMED_NONCE = "Nonce needs to be integer between 0 and MAX_SAFE_INTEGER"
    MALFORMED_CLAPS = "Claps needs to be a non-negative 32-bit integer"


def log_error(
    error: Exception,
    context: str,
    additional_data: Optional[Dict[str, Any]] = None
):
    """
    Log error with consistent format and context.

    Args:
        error: The exception that occurred
        context: Description of what was being done when error occurred
        additional_data: Optional additional data to log
    """
    log_data = {
        "context": context,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if additional_data:
        log_data.update(additional_data)

    logger.error(f"Error in {context}", extra=log_data)
