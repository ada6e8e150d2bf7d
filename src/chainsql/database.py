# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Database facade: hands out one fresh Query per statement."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .config import ConnectionConfig
from .sql import Connection, PreparedStatement, Query

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager


class Database:
    """Entry point of the fluent API.

    Every from_() call returns a new Query owned by the caller, so two
    statements built on the same Database never share clauses or
    placeholders. All queries share the Connection's single handle.

    Usage:
        db = Database({"driver": "sqlite", "name": "app.db"})
        users = await db.from_("users").select(all_rows=True)
        await db.close()
    """

    def __init__(
        self,
        connection: Connection | ConnectionConfig | dict[str, Any] | str,
        pkey: str = "id",
    ):
        """Initialize database.

        Args:
            connection: Connection, ConnectionConfig, config mapping (keys of
                ConnectionConfig, ``pass`` accepted) or connection string.
            pkey: Primary key column used to return ids of inserted rows.
        """
        if isinstance(connection, dict):
            connection = ConnectionConfig.from_mapping(connection)
        if not isinstance(connection, Connection):
            connection = Connection(connection)
        self.connection = connection
        self.pkey = pkey

    def from_(self, table: str) -> Query:
        """Return a new Query targeting table."""
        return Query(self.connection, pkey=self.pkey).from_(table)

    table = from_

    async def execute(
        self, sql: str, params: dict[str, Any] | None = None
    ) -> PreparedStatement:
        """Execute raw SQL with named params, values bound as given."""
        stmt = await self.connection.prepare(sql)
        for name, value in (params or {}).items():
            stmt.bind_value(name, value)
        await stmt.execute()
        return stmt

    def transaction(self) -> AbstractAsyncContextManager[Connection]:
        """Explicit transaction on the shared handle."""
        return self.connection.transaction()

    async def close(self) -> None:
        """Close the shared handle."""
        await self.connection.close()

    async def __aenter__(self) -> Database:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = ["Database"]
