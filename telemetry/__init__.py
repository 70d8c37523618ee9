"""
Telemetry module for structured logging.

This module provides:
- JSONFormatter for structured JSON log output
- TelemetryService for logging setup
- Audit logging for administrative session operations
"""

from telemetry.service import (
    JSONFormatter,
    TelemetryService,
    get_telemetry_service,
    initialize_telemetry,
    log_audit_event,
    request_id_var,
    set_request_id,
    get_request_id,
)

__all__ = [
    "JSONFormatter",
    "TelemetryService",
    "get_telemetry_service",
    "initialize_telemetry",
    "log_audit_event",
    "request_id_var",
    "set_request_id",
    "get_request_id",
]
