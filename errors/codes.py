"""
Error code catalog for the session store.

This module defines the error codes raised by the session store and the
session directory, covering configuration errors, store connectivity
failures and internal errors.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used by the session store.

    Each error code maps to a default HTTP status code so that a hosting
    application can surface the error without its own translation table:
    - Configuration errors (5xx): The session store is misconfigured
    - Store errors (5xx): The backing cache or table is unavailable
    - Internal errors (5xx): Unexpected failures
    """

    # Configuration errors
    INVALID_SESSION_DRIVER = "INVALID_SESSION_DRIVER"
    """Configured session driver is neither database nor redis-session (HTTP 500)"""

    # Store errors
    SESSION_STORE_UNAVAILABLE = "SESSION_STORE_UNAVAILABLE"
    """Redis or the sessions table is unavailable (HTTP 503)"""

    STORE_NOT_CONNECTED = "STORE_NOT_CONNECTED"
    """Cache store used before connect() (HTTP 500)"""

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Unexpected server error (HTTP 500)"""


# Mapping of error codes to their default HTTP status codes
ERROR_CODE_STATUS_MAP: dict[ErrorCode, int] = {
    ErrorCode.INVALID_SESSION_DRIVER: 500,
    ErrorCode.SESSION_STORE_UNAVAILABLE: 503,
    ErrorCode.STORE_NOT_CONNECTED: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


def get_default_status_code(error_code: ErrorCode) -> int:
    """
    Get the default HTTP status code for an error code.

    Args:
        error_code: The error code to look up

    Returns:
        The default HTTP status code for the error code
    """
    return ERROR_CODE_STATUS_MAP.get(error_code, 500)
