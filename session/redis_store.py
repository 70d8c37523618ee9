"""
Redis-based cache store implementation.

This module provides a Redis-backed implementation of the CacheStore
interface. Session documents are stored as strings under
``<connection prefix><store prefix><session id>`` with a TTL equal to the
session lifetime, so Redis expires abandoned sessions on its own.
"""

import logging
from typing import Any, Iterable, Optional, Union

from errors.exceptions import store_not_connected
from session.store import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_STORE_PREFIX = "session_cache:"


def _as_text(value: Union[str, bytes, None]) -> Optional[str]:
    """Decode a raw reply; bytes that are not UTF-8 read as a missing value."""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(
                "Discarding value that is not valid UTF-8",
                extra={"extra_data": {"size": len(value)}}
            )
            return None
    return value


class RedisCacheStore(CacheStore):
    """
    Redis-backed cache store.

    Attributes:
        redis_url: Redis connection URL (e.g., "redis://localhost:6379/0")
        client: Synchronous Redis client (given, or created by connect()).
            It must return raw bytes, not decoded responses, so that a
            corrupted value only affects its own key.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        prefix: str = DEFAULT_STORE_PREFIX,
        connection_prefix: str = "",
        client: Optional[Any] = None,
    ):
        """
        Initialize the Redis cache store.

        Args:
            redis_url: Redis connection URL used by connect()
            prefix: Store-level prefix for session keys
            connection_prefix: Prefix the connection applies in front of
                every key, for Redis instances shared between applications
            client: An already configured Redis client without
                ``decode_responses``; connect() is then not needed
        """
        self.redis_url = redis_url
        self.client = client
        self._prefix = prefix
        self._connection_prefix = connection_prefix

    @classmethod
    def from_url(cls, redis_url: str, **kwargs: Any) -> "RedisCacheStore":
        """Create a store and connect it to ``redis_url``."""
        store = cls(redis_url=redis_url, **kwargs)
        store.connect()
        return store

    def connect(self) -> None:
        """
        Establish connection to Redis.

        Raises:
            AppException: If no Redis URL was configured.
        """
        if not self.redis_url:
            raise store_not_connected("Redis URL not configured for the session store.")
        import redis
        self.client = redis.from_url(self.redis_url)

    def disconnect(self) -> None:
        """Close the Redis connection."""
        if self.client:
            self.client.close()
            self.client = None

    @property
    def prefix(self) -> str:
        return self._prefix

    def connection_prefix(self) -> str:
        return self._connection_prefix

    def _get_key(self, key: str) -> str:
        """
        Generate the physical Redis key for a logical key.

        Returns:
            Redis key with the connection and store prefixes.
        """
        return f"{self._connection_prefix}{self._prefix}{key}"

    def _require_client(self) -> Any:
        if not self.client:
            raise store_not_connected()
        return self.client

    def get(self, key: str) -> Optional[str]:
        client = self._require_client()
        return _as_text(client.get(self._get_key(key)))

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        client = self._require_client()
        client.setex(self._get_key(key), max(int(ttl_seconds), 1), value)

    def delete(self, key: str) -> bool:
        client = self._require_client()
        client.delete(self._get_key(key))
        return True

    def many(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        """Fetch all keys with a single MGET."""
        keys = list(keys)
        if not keys:
            return {}
        client = self._require_client()
        values = client.mget([self._get_key(key) for key in keys])
        return {key: _as_text(value) for key, value in zip(keys, values)}

    def flush(self) -> bool:
        """Flush the whole Redis database the client is connected to."""
        client = self._require_client()
        logger.warning(
            "Flushing Redis database backing the session store",
            extra={"extra_data": {"prefix": self._connection_prefix + self._prefix}}
        )
        return bool(client.flushdb())

    def keys(self, pattern: str = "*") -> list[str]:
        """
        List physical keys with SCAN, so the server is not blocked the way
        KEYS would block it. Still O(N) over the whole database.

        Keys that are not valid UTF-8 cannot name a session and are skipped.
        """
        client = self._require_client()
        keys = (_as_text(key) for key in client.scan_iter(match=pattern))
        return [key for key in keys if key is not None]

    def health_check(self) -> bool:
        """
        Check connectivity and health of the Redis store.

        Returns:
            True if Redis is healthy and accessible, False otherwise.
        """
        if not self.client:
            return False

        try:
            result = self.client.ping()
            return result is True
        except Exception as e:
            logger.warning(
                "Redis health check failed",
                extra={"extra_data": {"error": str(e)}}
            )
            return False

