"""
Session enumeration over a cache store.

A key-value cache has no index of the sessions it holds, so the whole
population is rebuilt by scanning the key space, fetching every value in
one batch and decoding each one.

The scan covers every key in the store, not only session keys, and costs
O(total keys). The store must be dedicated to sessions: unrelated keys are
fetched like session keys and only dropped when they fail to decode.
"""

import logging

from session.record import SessionRecord, decode_record
from session.store import CacheStore

logger = logging.getLogger(__name__)


class SessionEnumerator:
    """Reconstructs all stored sessions from a cache store."""

    def __init__(self, store: CacheStore):
        self.store = store

    def full_prefix(self) -> str:
        """The connection-level prefix followed by the store-level prefix."""
        return self.store.connection_prefix() + self.store.prefix

    def session_ids(self) -> list[str]:
        """List logical session ids by stripping the full prefix from every key."""
        prefix = self.full_prefix()
        return [
            key[len(prefix):] if prefix and key.startswith(prefix) else key
            for key in self.store.keys("*")
        ]

    def read_all(self) -> list[SessionRecord]:
        """
        Decode every session in the store.

        Missing and empty values are skipped, as are values that do not
        decode to a session document.

        Returns:
            Records in store scan order.
        """
        values = self.store.many(self.session_ids())

        records = []
        for session_id, raw in values.items():
            if not raw:
                continue
            record = decode_record(raw, session_id)
            if record is not None:
                records.append(record)

        logger.debug(
            "Enumerated sessions",
            extra={"extra_data": {"keys": len(values), "sessions": len(records)}}
        )
        return records
