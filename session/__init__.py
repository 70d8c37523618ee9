"""
Enhanced session storage.

This module stores web sessions in a key-value cache together with their
last activity, owning user, client IP and user agent, and lists and
administers the whole session population through the session directory.
"""

from session.store import CacheStore
from session.redis_store import RedisCacheStore, DEFAULT_STORE_PREFIX
from session.memory_store import InMemoryCacheStore
from session.metadata import (
    IdentityProvider,
    MetadataEnricher,
    RequestContext,
    SessionMetadata,
    USER_AGENT_MAX_LENGTH,
)
from session.record import SessionRecord, decode_record, encode_record
from session.enumerator import SessionEnumerator
from session.handler import EnhancedSessionHandler
from session.database import SessionTable, sessions_table
from session.directory import SessionDirectory, SessionDriver
from session.provider import DRIVER_NAME, SessionServiceProvider, create_cache_store

__all__ = [
    "CacheStore",
    "RedisCacheStore",
    "DEFAULT_STORE_PREFIX",
    "InMemoryCacheStore",
    "IdentityProvider",
    "MetadataEnricher",
    "RequestContext",
    "SessionMetadata",
    "USER_AGENT_MAX_LENGTH",
    "SessionRecord",
    "decode_record",
    "encode_record",
    "SessionEnumerator",
    "EnhancedSessionHandler",
    "SessionTable",
    "sessions_table",
    "SessionDirectory",
    "SessionDriver",
    "DRIVER_NAME",
    "SessionServiceProvider",
    "create_cache_store",
]
