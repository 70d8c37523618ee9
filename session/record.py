"""
Session record codec.

A session is stored as a JSON document holding the base64-encoded session
body together with its metadata. Decoding never raises: anything that is
not a well-formed session document decodes to None and is treated by
callers as "no session".
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from session.metadata import SessionMetadata

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float)


@dataclass(frozen=True)
class SessionRecord:
    """
    A stored session with its metadata.

    Attributes:
        id: Session identifier
        payload: Base64 text of the framework's session body, None when the
            document carries no body
        last_activity: Unix timestamp of the last write
        user_id: Id of the owning user, if any
        ip_address: Client IP address of the last write, if known
        user_agent: User agent of the last write, if known
    """
    id: str
    payload: Optional[str]
    last_activity: int
    user_id: Any = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def data(self) -> bytes:
        """The decoded session body; empty when missing or not valid base64."""
        if self.payload is None:
            return b""
        return decode_payload(self.payload) or b""

    def is_active(self, since: int) -> bool:
        """Whether the session was written at or after ``since``."""
        return self.last_activity >= since

    def belongs_to(self, user_id: Any) -> bool:
        """
        Whether the session is owned by ``user_id``.

        Ids are compared by their string form so that ``42`` and ``"42"``
        name the same user regardless of how the store typed them.
        """
        if self.user_id is None or user_id is None:
            return False
        return str(self.user_id) == str(user_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "last_activity": self.last_activity,
            "payload": self.payload,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SessionRecord":
        """Build a record from a sessions table row."""
        return cls(
            id=row["id"],
            payload=row["payload"] or "",
            last_activity=int(row["last_activity"] or 0),
            user_id=row["user_id"],
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
        )


def encode_payload(data: Union[bytes, str]) -> str:
    """Base64-encode a session body."""
    if isinstance(data, str):
        data = data.encode("utf-8", errors="surrogateescape")
    return base64.b64encode(data).decode("ascii")


def decode_payload(payload: str) -> Optional[bytes]:
    """Decode a base64 session body, returning None when it is not valid base64."""
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def encode_record(data: Union[bytes, str], metadata: SessionMetadata) -> str:
    """
    Serialize a session body and its metadata to a JSON document.

    Args:
        data: The opaque session body
        metadata: Metadata to store alongside the body

    Returns:
        JSON text with ``payload``, ``last_activity`` and whichever of
        ``user_id``, ``ip_address`` and ``user_agent`` are present.
    """
    document = {"payload": encode_payload(data)}
    document.update(metadata.to_dict())
    return json.dumps(document)


def decode_record(raw: Union[str, bytes, None], session_id: str = "") -> Optional[SessionRecord]:
    """
    Parse a stored JSON document into a SessionRecord.

    A missing (or null) ``payload`` decodes as None and a missing
    ``last_activity`` as timestamp 0. Present fields of the wrong type make the
    whole document unusable.

    Args:
        raw: The stored document
        session_id: Id to assign to the decoded record

    Returns:
        The decoded record, or None if the document is malformed.
    """
    if not raw:
        return None

    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.debug(
            "Discarding malformed session document",
            extra={"extra_data": {"session_id": session_id, "error": str(e)}}
        )
        return None

    if not isinstance(document, dict):
        return None

    payload = document.get("payload")
    last_activity = document.get("last_activity", 0)
    user_id = document.get("user_id")
    ip_address = document.get("ip_address")
    user_agent = document.get("user_agent")

    if (
        (payload is not None and not isinstance(payload, str))
        or not isinstance(last_activity, int)
        or isinstance(last_activity, bool)
        or (user_id is not None and not isinstance(user_id, _SCALAR_TYPES))
        or (ip_address is not None and not isinstance(ip_address, str))
        or (user_agent is not None and not isinstance(user_agent, str))
    ):
        logger.debug(
            "Discarding session document with unexpected field types",
            extra={"extra_data": {"session_id": session_id}}
        )
        return None

    return SessionRecord(
        id=session_id,
        payload=payload,
        last_activity=last_activity,
        user_id=user_id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
