"""
Middleware components for the session store.

This module contains the Starlette/FastAPI middleware that exposes the
current request to the session metadata enricher and to logging.
"""

from middleware.request_context import (
    RequestContextMiddleware,
    StarletteRequestContext,
    RequestStateIdentity,
    current_request_var,
    get_current_request,
    get_client_ip,
    REQUEST_ID_HEADER,
)

__all__ = [
    "RequestContextMiddleware",
    "StarletteRequestContext",
    "RequestStateIdentity",
    "current_request_var",
    "get_current_request",
    "get_client_ip",
    "REQUEST_ID_HEADER",
]
