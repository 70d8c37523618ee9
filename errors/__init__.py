"""
Error handling module for the session store.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- AppException class for session-store exceptions
- Factory functions for the common failure conditions
- Exception handlers for FastAPI integration
"""

from errors.codes import ErrorCode, get_default_status_code
from errors.exceptions import (
    AppException,
    invalid_session_driver,
    session_store_unavailable,
    store_not_connected,
    internal_error,
)
from errors.handlers import (
    ErrorResponse,
    handle_app_exception,
    handle_unexpected_exception,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "get_default_status_code",
    "AppException",
    "invalid_session_driver",
    "session_store_unavailable",
    "store_not_connected",
    "internal_error",
    "ErrorResponse",
    "handle_app_exception",
    "handle_unexpected_exception",
    "register_exception_handlers",
]
