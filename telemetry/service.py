"""
Telemetry service for structured logging.

This module provides structured JSON logging with request correlation and
audit logging for administrative session operations such as revoking a
user's sessions or wiping the store.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict
from contextvars import ContextVar

# Correlation id of the request being served, set by the request context middleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_audit_logger = logging.getLogger("audit")


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs logs in JSON format.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry
    - request_id: Correlation ID for request tracing

    Additional fields can be included via the 'extra_data' attribute
    on the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "request_id": request_id_var.get(""),
        }

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


class TelemetryService:
    """
    Centralized logging setup.

    Installs the JSON formatter on the root logger at the level configured
    in settings.
    """

    def __init__(self, settings: Optional[Any] = None):
        """
        Initialize the telemetry service.

        Args:
            settings: Settings providing ``log_level``
        """
        self.settings = settings
        self._logger = None
        self._setup_logging()

    def _setup_logging(self) -> None:
        log_level_str = "INFO"
        if self.settings and hasattr(self.settings, "log_level"):
            log_level_str = self.settings.log_level

        log_level = getattr(logging, log_level_str.upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicate logs
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(log_level)
        stdout_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(stdout_handler)

        self._logger = logging.getLogger("telemetry")
        self._logger.info("Telemetry service initialized", extra={
            "extra_data": {"log_level": log_level_str}
        })

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger that writes through the JSON formatter."""
        return logging.getLogger(name)


def log_audit_event(
    event_type: str,
    user_id: Optional[str],
    resource_type: str,
    resource_id: Optional[str],
    action: str,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an audit event for an administrative operation.

    Args:
        event_type: Type of audit event (e.g., "session_revocation")
        user_id: ID of the user the operation concerns
        resource_type: Type of resource being acted upon
        resource_id: ID of the specific resource
        action: Action being performed (e.g., "delete", "delete_all")
        details: Additional details about the event
    """
    audit_data = {
        "audit_event": True,
        "event_type": event_type,
        "user_id": user_id,
        "resource_type": resource_type,
        "resource_id": resource_id,
        "action": action,
    }

    if details:
        audit_data["details"] = details

    _audit_logger.info(
        f"Audit: {event_type} - {action} on {resource_type}",
        extra={"extra_data": audit_data}
    )


# Global telemetry service instance
_telemetry_service: Optional[TelemetryService] = None


def get_telemetry_service() -> Optional[TelemetryService]:
    """
    Get the global telemetry service instance.

    Returns:
        The telemetry service instance, or None if not initialized
    """
    return _telemetry_service


def initialize_telemetry(settings: Optional[Any] = None) -> TelemetryService:
    """
    Initialize the global telemetry service.

    Args:
        settings: Settings for configuration

    Returns:
        The initialized telemetry service
    """
    global _telemetry_service
    _telemetry_service = TelemetryService(settings)
    return _telemetry_service


def set_request_id(request_id: str) -> None:
    """
    Set the request ID for the current context.

    For use outside the middleware, e.g. in background tasks.
    """
    request_id_var.set(request_id)


def get_request_id() -> str:
    """
    Get the current request ID from context.

    Returns:
        The current request ID, or empty string if not set
    """
    return request_id_var.get("")
