"""
Request context middleware.

Binds the request being served, and a correlation ID for it, to context
variables so that code without access to the request object (the session
metadata enricher, the log formatter) can still read from it.
"""

import uuid
from contextvars import ContextVar
from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from session.metadata import IdentityProvider, RequestContext
from telemetry.service import request_id_var

# The request currently being served, None outside a request
current_request_var: ContextVar[Optional[Request]] = ContextVar("current_request", default=None)

# Header name for request ID
REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that binds the current request and its request ID.

    The request ID is:
    1. Extracted from the X-Request-ID header if present
    2. Generated as a new UUID if not present
    3. Stored in request.state and in a context variable for logging
    4. Added to the response headers

    Both context variables are reset once the response is produced.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER)
        if not request_id:
            request_id = str(uuid.uuid4())

        request.state.request_id = request_id

        request_token = current_request_var.set(request)
        id_token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            # Reset the context variables to avoid leaking between requests
            request_id_var.reset(id_token)
            current_request_var.reset(request_token)


def get_current_request() -> Optional[Request]:
    """Get the request being served, or None outside a request."""
    return current_request_var.get()


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client IP address from the request.

    Checks common forwarding headers before falling back to the direct
    client address.
    """
    # X-Forwarded-For can contain multiple IPs, take the first (original client)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Used by some proxies like nginx
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client is not None:
        return request.client.host
    return None


class StarletteRequestContext(RequestContext):
    """Request accessor reading the request bound by RequestContextMiddleware."""

    def current_ip(self) -> Optional[str]:
        request = get_current_request()
        if request is None:
            return None
        return get_client_ip(request)

    def header(self, name: str) -> Optional[str]:
        request = get_current_request()
        if request is None:
            return None
        return request.headers.get(name)


class RequestStateIdentity(IdentityProvider):
    """
    Identity accessor reading the authenticated user id from ``request.state``.

    The authentication layer is expected to store the id on the request
    state under ``attribute``; guests simply leave it unset.
    """

    def __init__(self, attribute: str = "user_id"):
        self.attribute = attribute

    def current_user_id(self) -> Optional[Any]:
        request = get_current_request()
        if request is None:
            return None
        return getattr(request.state, self.attribute, None)
