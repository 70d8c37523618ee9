"""
Cache store abstraction for session storage.

This module defines the key-value contract the session handler and the
session enumerator are built on. Keys passed to and returned by the
store-level operations are logical keys: the store applies its own
prefixes. Only ``keys()`` works on the physical key space, because
enumerating sessions needs to see exactly what the server holds.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional


class CacheStore(ABC):
    """
    Abstract base class for the key-value cache backing the sessions.

    Implementations may use Redis or an in-process dictionary. All methods
    are synchronous; connection pooling and thread safety belong to the
    underlying client.
    """

    @property
    @abstractmethod
    def prefix(self) -> str:
        """The store-level prefix prepended to every logical key."""

    def connection_prefix(self) -> str:
        """
        The connection-level prefix prepended in front of the store prefix.

        Only some connections namespace their keys; the default is no prefix.
        """
        return ""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value stored under a key.

        Returns:
            The stored string, or None if the key does not exist or has expired.
        """

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value, replacing any previous value, expiring after ``ttl_seconds``.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        This operation is idempotent - deleting a missing key does not raise.

        Returns:
            True once the key is gone.
        """

    @abstractmethod
    def many(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        """
        Retrieve several keys in one batched call.

        Returns:
            Mapping of every requested key to its value, or None when missing.
        """

    @abstractmethod
    def flush(self) -> bool:
        """
        Remove every key in the store, not only session keys.

        Returns:
            True if the store was flushed.
        """

    @abstractmethod
    def keys(self, pattern: str = "*") -> list[str]:
        """
        List the physical keys matching a glob pattern, prefixes included.
        """

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check connectivity and health of the store.

        Note:
            This method should not raise exceptions - connectivity issues
            should be caught and result in a False return value.
        """
