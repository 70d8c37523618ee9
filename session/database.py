"""
Relational sessions table.

The database session driver keeps sessions in a table with one row per
session. This module lists, deletes and truncates those rows so that the
session directory can serve both drivers through the same API.
"""

import logging
from typing import Any, Optional

from sqlalchemy import Column, Engine, Integer, MetaData, String, Table, Text, delete, select

from session.record import SessionRecord

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TABLE = "sessions"


def sessions_table(metadata: MetaData, name: str = DEFAULT_SESSION_TABLE) -> Table:
    """
    Define the sessions table.

    ``user_id`` is stored as text so that integer and string user ids can
    share the column; lookups compare the string form.
    """
    return Table(
        name,
        metadata,
        Column("id", String(255), primary_key=True),
        Column("user_id", String(255), nullable=True, index=True),
        Column("ip_address", String(45), nullable=True),
        Column("user_agent", Text, nullable=True),
        Column("payload", Text, nullable=False),
        Column("last_activity", Integer, nullable=False, index=True),
    )


class SessionTable:
    """
    Sessions stored in a relational table.

    Attributes:
        engine: SQLAlchemy engine for the session connection
        table: The sessions table definition
    """

    def __init__(self, engine: Engine, table_name: str = DEFAULT_SESSION_TABLE):
        self.engine = engine
        self.metadata = MetaData()
        self.table = sessions_table(self.metadata, table_name)

    def create(self) -> None:
        """Create the sessions table if it does not exist."""
        self.metadata.create_all(self.engine, tables=[self.table])

    def all(self, user_id: Optional[Any] = None) -> list[SessionRecord]:
        """
        List sessions, optionally only those of ``user_id``.

        Returns:
            Records in table order.
        """
        query = select(self.table)
        if user_id is not None:
            query = query.where(self.table.c.user_id == str(user_id))

        with self.engine.connect() as connection:
            rows = connection.execute(query).mappings().all()

        return [SessionRecord.from_row(row) for row in rows]

    def destroy(self, session_id: str) -> bool:
        """Delete one session row. Deleting a missing row is not an error."""
        with self.engine.begin() as connection:
            connection.execute(delete(self.table).where(self.table.c.id == session_id))
        return True

    def truncate(self) -> None:
        """Delete every session row."""
        with self.engine.begin() as connection:
            result = connection.execute(delete(self.table))
        logger.info(
            "Sessions table truncated",
            extra={"extra_data": {"table": self.table.name, "rows": result.rowcount}}
        )
