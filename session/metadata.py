"""
Metadata enrichment for session writes.

Every stored session carries the time of its last write and, when the
hosting application can provide them, the id of the authenticated user
and the client's IP address and user agent. The enricher reads these
from optional accessors at write time; it never modifies them.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

# Longest user agent kept on a session record
USER_AGENT_MAX_LENGTH = 500


class IdentityProvider(ABC):
    """Accessor for the currently authenticated user."""

    @abstractmethod
    def current_user_id(self) -> Optional[Any]:
        """Return the id of the authenticated user, or None for guests."""


class RequestContext(ABC):
    """Accessor for the request currently being served."""

    @abstractmethod
    def current_ip(self) -> Optional[str]:
        """Return the client IP address, or None when unknown."""

    @abstractmethod
    def header(self, name: str) -> Optional[str]:
        """Return a request header value, or None when absent."""


@dataclass(frozen=True)
class SessionMetadata:
    """
    Metadata stored alongside a session payload.

    Attributes:
        last_activity: Unix timestamp of the write
        user_id: Id of the owning user, if one was authenticated
        ip_address: Client IP address of the writing request
        user_agent: User agent of the writing request, at most 500 characters
    """
    last_activity: int
    user_id: Any = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary, omitting absent optional fields."""
        result: dict[str, Any] = {"last_activity": self.last_activity}
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.ip_address is not None:
            result["ip_address"] = self.ip_address
        if self.user_agent is not None:
            result["user_agent"] = self.user_agent
        return result


class MetadataEnricher:
    """
    Builds the metadata attached to a session on every write.

    Attributes:
        identity: Optional accessor for the authenticated user
        request_context: Optional accessor for the current request
        clock: Callable returning the current Unix time
    """

    def __init__(
        self,
        identity: Optional[IdentityProvider] = None,
        request_context: Optional[RequestContext] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.identity = identity
        self.request_context = request_context
        self.clock = clock

    def build(self) -> SessionMetadata:
        """
        Build the metadata for a write happening now.

        The user id is included only when an identity accessor is configured
        and reports a user. Request information is included whenever a
        request accessor is configured.
        """
        user_id = None
        if self.identity is not None:
            user_id = self.identity.current_user_id()

        ip_address = None
        user_agent = None
        if self.request_context is not None:
            ip_address = self.request_context.current_ip()
            user_agent = (self.request_context.header("User-Agent") or "")[:USER_AGENT_MAX_LENGTH]

        return SessionMetadata(
            last_activity=int(self.clock()),
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
