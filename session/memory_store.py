"""
In-memory cache store.

Keeps values in a dictionary with lazy TTL eviction. Used when no Redis
URL is configured in development, and in tests. Not suitable for
production: values are lost on restart and not shared between workers.
"""

import fnmatch
import time
from typing import Callable, Iterable, Optional

from session.store import CacheStore


class InMemoryCacheStore(CacheStore):
    """
    Dictionary-backed cache store.

    Physical keys carry the store prefix so that ``keys()`` behaves like
    a scan of a dedicated Redis database.
    """

    def __init__(self, prefix: str = "", clock: Callable[[], float] = time.time):
        self._prefix = prefix
        self._clock = clock
        self._values: dict[str, tuple[str, float]] = {}

    @property
    def prefix(self) -> str:
        return self._prefix

    def _get_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _live(self, physical_key: str) -> Optional[str]:
        entry = self._values.get(physical_key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._values[physical_key]
            return None
        return value

    def get(self, key: str) -> Optional[str]:
        return self._live(self._get_key(key))

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._values[self._get_key(key)] = (value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> bool:
        self._values.pop(self._get_key(key), None)
        return True

    def many(self, keys: Iterable[str]) -> dict[str, Optional[str]]:
        return {key: self.get(key) for key in keys}

    def flush(self) -> bool:
        self._values.clear()
        return True

    def keys(self, pattern: str = "*") -> list[str]:
        return [
            key for key in list(self._values)
            if fnmatch.fnmatchcase(key, pattern) and self._live(key) is not None
        ]

    def health_check(self) -> bool:
        return True
