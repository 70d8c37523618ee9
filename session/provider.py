"""
Session driver registration.

Wires settings, the cache store, the metadata accessors and the sessions
table together. The provider owns one cache store and hands out a fresh
session handler for every request, since a handler tracks the existence
of the one session it serves.
"""

import logging
import time
from typing import Any, Callable, Optional

from sqlalchemy import create_engine

from config.settings import Environment, Settings
from errors.exceptions import session_store_unavailable
from session.database import SessionTable
from session.directory import SessionDirectory
from session.handler import EnhancedSessionHandler
from session.memory_store import InMemoryCacheStore
from session.metadata import IdentityProvider, MetadataEnricher, RequestContext
from session.redis_store import RedisCacheStore
from session.store import CacheStore

logger = logging.getLogger(__name__)

DRIVER_NAME = "redis-session"


def create_cache_store(settings: Settings, client: Optional[Any] = None) -> CacheStore:
    """
    Create the cache store for the session driver.

    A given Redis client is used as is. Otherwise the session connection
    URL, falling back to the Redis URL, is connected to. Without either,
    development runs on an in-memory store.

    Raises:
        AppException: SESSION_STORE_UNAVAILABLE if no store can be built.
    """
    if client is not None:
        return RedisCacheStore(
            client=client,
            prefix=settings.cache_prefix,
            connection_prefix=settings.redis_prefix,
        )

    redis_url = settings.session_redis_url
    if redis_url:
        return RedisCacheStore.from_url(
            redis_url,
            prefix=settings.cache_prefix,
            connection_prefix=settings.redis_prefix,
        )

    if settings.environment == Environment.DEVELOPMENT:
        logger.warning("No Redis URL configured, sessions are kept in memory")
        return InMemoryCacheStore(prefix=settings.cache_prefix)

    raise session_store_unavailable(
        "No Redis URL configured for the session store",
        details={"environment": settings.environment.value},
    )


class SessionServiceProvider:
    """
    Builds session handlers and the session directory from settings.

    Attributes:
        settings: Session settings
        identity: Optional accessor for the authenticated user
        request_context: Optional accessor for the current request
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[CacheStore] = None,
        identity: Optional[IdentityProvider] = None,
        request_context: Optional[RequestContext] = None,
        table: Optional[SessionTable] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.identity = identity
        self.request_context = request_context
        self.clock = clock
        self._store = store
        self._table = table

    @property
    def store(self) -> CacheStore:
        if self._store is None:
            self._store = create_cache_store(self.settings)
        return self._store

    @property
    def table(self) -> Optional[SessionTable]:
        """The sessions table, when a database URL is configured."""
        if self._table is None and self.settings.database_url:
            engine = create_engine(self.settings.database_url)
            self._table = SessionTable(engine, self.settings.session_table)
        return self._table

    def handler(self) -> EnhancedSessionHandler:
        """Create a session handler for one request."""
        enricher = MetadataEnricher(
            identity=self.identity,
            request_context=self.request_context,
            clock=self.clock,
        )
        return EnhancedSessionHandler(
            store=self.store,
            lifetime_minutes=self.settings.session_lifetime,
            enricher=enricher,
            clock=self.clock,
        )

    def directory(self) -> SessionDirectory:
        """
        Create the session directory for the configured driver.

        Only the collaborator the driver needs is built; an unsupported
        driver gets neither and is reported by the directory itself.
        """
        driver = self.settings.session_driver
        handler = self.handler() if driver == DRIVER_NAME else None
        table = self.table if driver == "database" else None

        return SessionDirectory(
            driver_name=driver,
            lifetime_minutes=self.settings.session_lifetime,
            handler=handler,
            table=table,
            clock=self.clock,
        )
