"""
Enhanced cache-backed session handler.

Implements the read/write/destroy contract a web framework's session
middleware expects, storing every session as a JSON document that also
records its last activity, owning user, client IP and user agent.

A handler instance tracks whether the session it serves is known to
exist in the store. Build one handler per request; sharing an instance
across sessions or threads mixes up that state.
"""

import logging
import time
from typing import Callable, Optional, Union

from session.enumerator import SessionEnumerator
from session.metadata import MetadataEnricher
from session.record import SessionRecord, decode_payload, decode_record, encode_record
from session.store import CacheStore

logger = logging.getLogger(__name__)


class EnhancedSessionHandler:
    """
    Session handler storing enriched session documents in a cache store.

    Attributes:
        store: The cache store holding the sessions
        lifetime_minutes: Session lifetime; also the TTL of every write
        enricher: Builds the metadata attached to each write
        exists: Whether the current session is known to exist in the store
    """

    def __init__(
        self,
        store: CacheStore,
        lifetime_minutes: int,
        enricher: Optional[MetadataEnricher] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.lifetime_minutes = lifetime_minutes
        self.clock = clock
        self.enricher = enricher or MetadataEnricher(clock=clock)
        self.exists = False

    def _expired(self, record: SessionRecord) -> bool:
        return record.last_activity < int(self.clock()) - self.lifetime_minutes * 60

    def read(self, session_id: str) -> str:
        """
        Read the session body stored under ``session_id``.

        A missing, undecodable or expired session reads as an empty string.
        The handler is marked as existing when the session is expired,
        since its key is still present in the store, or carries a body.

        Bodies that are not UTF-8 text come back with their bytes kept as
        surrogate escapes, so writing the result back stores them unchanged.
        """
        raw = self.store.get(session_id)
        if not raw:
            return ""

        record = decode_record(raw, session_id)
        if record is None:
            return ""

        if self._expired(record):
            self.exists = True
            logger.debug(
                "Session expired",
                extra={"extra_data": {"last_activity": record.last_activity}}
            )
            return ""

        if record.payload is None:
            return ""

        self.exists = True

        data = decode_payload(record.payload)
        if data is None:
            return ""
        return data.decode("utf-8", errors="surrogateescape")

    def write(self, session_id: str, data: Union[str, bytes]) -> bool:
        """
        Store the session body with fresh metadata.

        Unless the session is already known to exist, the store is read
        first to settle the existence flag.
        """
        metadata = self.enricher.build()

        if not self.exists:
            self.read(session_id)

        self.store.set(
            session_id,
            encode_record(data, metadata),
            self.lifetime_minutes * 60,
        )

        self.exists = True
        return True

    def destroy(self, session_id: str) -> bool:
        """Delete a session. Deleting a missing session is not an error."""
        return self.store.delete(session_id)

    def gc(self, max_lifetime: int) -> int:
        """Nothing to collect: the store expires sessions through their TTL."""
        return 0

    def set_exists(self, value: bool) -> "EnhancedSessionHandler":
        """Record whether the framework knows the session to exist."""
        self.exists = bool(value)
        return self

    def read_all(self) -> list[SessionRecord]:
        """Decode every session in the store. See SessionEnumerator."""
        return SessionEnumerator(self.store).read_all()

    def destroy_all(self) -> bool:
        """
        Flush the entire store.

        This removes every key the store holds, sessions or not.
        """
        return self.store.flush()
