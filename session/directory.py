"""
Session directory: query and administration API over all sessions.

Works with either the database session driver, where sessions are rows in
a table, or the redis-session driver, where they are rebuilt by scanning
the cache store.

An unsupported driver is handled differently per operation:
``get_for_user`` and ``is_using_valid_driver`` report it softly (empty
list, False) while ``get_all`` and ``delete_all`` raise
``INVALID_SESSION_DRIVER``.
"""

import logging
import time
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from errors.exceptions import invalid_session_driver
from session.database import SessionTable
from session.handler import EnhancedSessionHandler
from session.record import SessionRecord
from telemetry.service import log_audit_event

logger = logging.getLogger(__name__)


class SessionDriver(str, Enum):
    """Session drivers the directory can list and administer."""
    DATABASE = "database"
    REDIS = "redis-session"

    @classmethod
    def current(cls, name: Optional[str]) -> Optional["SessionDriver"]:
        """Resolve a configured driver name, or None if it is not supported."""
        try:
            return cls(name)
        except ValueError:
            return None


class SessionDirectory:
    """
    Lists and deletes sessions across the whole store.

    Attributes:
        driver_name: The configured session driver name
        lifetime_minutes: Session lifetime, used for the active filter
        handler: Session handler used by the redis-session driver
        table: Sessions table used by the database driver
    """

    def __init__(
        self,
        driver_name: str,
        lifetime_minutes: int,
        handler: Optional[EnhancedSessionHandler] = None,
        table: Optional[SessionTable] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.driver_name = driver_name
        self.lifetime_minutes = lifetime_minutes
        self.handler = handler
        self.table = table
        self.clock = clock

    @property
    def driver(self) -> Optional[SessionDriver]:
        return SessionDriver.current(self.driver_name)

    def is_using_valid_driver(self) -> bool:
        return self.driver is not None

    def active_since(self) -> int:
        """Oldest last-activity timestamp that still counts as an active session."""
        return int(self.clock()) - self.lifetime_minutes * 60

    def get_for_user(self, user_id: Union[int, str], only_active: bool = False) -> list[SessionRecord]:
        """
        Get the sessions of a user, most recently active first.

        Args:
            user_id: Id of the user, as stored on the sessions
            only_active: Only return sessions active within the lifetime

        Returns:
            A new list; empty when the driver is not supported.
        """
        if not self.is_using_valid_driver():
            return []

        sessions = self.get_all(user_id)

        if only_active:
            since = self.active_since()
            sessions = [session for session in sessions if session.is_active(since)]

        return sorted(sessions, key=lambda session: session.last_activity, reverse=True)

    def delete_for_user_except_session(
        self,
        user_id: Union[int, str],
        except_session_id: Union[str, Iterable[str]] = (),
    ) -> list[str]:
        """
        Delete a user's sessions except the given ones.

        Used to log a user out of their other devices.

        Args:
            user_id: Id of the user
            except_session_id: One session id or several to keep; empty
                deletes every session of the user

        Returns:
            Ids of the deleted sessions.
        """
        if isinstance(except_session_id, str):
            kept = {except_session_id}
        else:
            kept = set(except_session_id)

        doomed = [
            session.id for session in self.get_for_user(user_id)
            if session.id not in kept
        ]

        for session_id in doomed:
            self._destroy(session_id)

        if doomed:
            log_audit_event(
                event_type="session_revocation",
                user_id=str(user_id),
                resource_type="session",
                resource_id=None,
                action="delete",
                details={"deleted": len(doomed), "kept": len(kept)},
            )
        return doomed

    def get_all(self, user_id: Optional[Union[int, str]] = None) -> list[SessionRecord]:
        """
        Get all stored sessions, optionally only those of one user.

        Raises:
            AppException: INVALID_SESSION_DRIVER if the driver is not supported.
        """
        driver = self.driver

        if driver is SessionDriver.DATABASE:
            return self._require_table().all(user_id)

        if driver is SessionDriver.REDIS:
            sessions = self._require_handler().read_all()
            if user_id is None:
                return sessions
            return [session for session in sessions if session.belongs_to(user_id)]

        raise invalid_session_driver(self.driver_name)

    def delete_all(self) -> None:
        """
        Destroy every session.

        With the redis-session driver this flushes the entire store.

        Raises:
            AppException: INVALID_SESSION_DRIVER if the driver is not supported.
        """
        driver = self.driver

        if driver is SessionDriver.DATABASE:
            self._require_table().truncate()
        elif driver is SessionDriver.REDIS:
            self._require_handler().destroy_all()
        else:
            raise invalid_session_driver(self.driver_name)

        log_audit_event(
            event_type="session_wipe",
            user_id=None,
            resource_type="session",
            resource_id=None,
            action="delete_all",
            details={"driver": driver.value},
        )

    def _destroy(self, session_id: str) -> bool:
        if self.driver is SessionDriver.DATABASE:
            return self._require_table().destroy(session_id)
        return self._require_handler().destroy(session_id)

    def _require_handler(self) -> EnhancedSessionHandler:
        if self.handler is None:
            raise invalid_session_driver(
                self.driver_name,
                message="The redis-session driver requires a session handler",
            )
        return self.handler

    def _require_table(self) -> SessionTable:
        if self.table is None:
            raise invalid_session_driver(
                self.driver_name,
                message="The database driver requires a sessions table",
            )
        return self.table
