"""
Exception classes for the session store.

This module provides the AppException class and convenience factory
functions for creating session-store exceptions with proper error codes.
"""

from typing import Any, Optional

from errors.codes import ErrorCode, get_default_status_code


class AppException(Exception):
    """
    Base exception class for all session-store errors.

    This exception provides structured error information including:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - status_code: The HTTP status code a hosting application should return
    - details: Optional additional context (e.g., the offending driver name)

    Example:
        raise AppException(
            error_code=ErrorCode.INVALID_SESSION_DRIVER,
            message="Session directory requires the database or redis-session driver",
            details={"driver": "file"}
        )
    """

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None
    ):
        """
        Initialize an AppException.

        Args:
            error_code: The error code from the ErrorCode enum
            message: A human-readable error message
            status_code: The HTTP status code (defaults to the error code's default)
            details: Optional dictionary with additional error context
        """
        self.error_code = error_code
        self.message = message
        self.status_code = status_code or get_default_status_code(error_code)
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for JSON serialization.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"AppException(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, status_code={self.status_code}, "
            f"details={self.details!r})"
        )


# Convenience factory functions for common error types

def invalid_session_driver(
    driver: Optional[str],
    message: str = "Session directory can only be used with the database or redis-session drivers",
) -> AppException:
    """Create an invalid session driver exception."""
    return AppException(
        error_code=ErrorCode.INVALID_SESSION_DRIVER,
        message=message,
        details={"driver": driver}
    )


def session_store_unavailable(
    message: str = "Session store unavailable",
    details: Optional[dict[str, Any]] = None
) -> AppException:
    """Create a session store unavailable exception."""
    return AppException(
        error_code=ErrorCode.SESSION_STORE_UNAVAILABLE,
        message=message,
        details=details
    )


def store_not_connected(
    message: str = "Redis client not connected. Call connect() first.",
    details: Optional[dict[str, Any]] = None
) -> AppException:
    """Create a store not connected exception."""
    return AppException(
        error_code=ErrorCode.STORE_NOT_CONNECTED,
        message=message,
        details=details
    )


def internal_error(
    message: str = "An unexpected error occurred",
    details: Optional[dict[str, Any]] = None
) -> AppException:
    """Create an internal error exception."""
    return AppException(
        error_code=ErrorCode.INTERNAL_ERROR,
        message=message,
        details=details
    )
