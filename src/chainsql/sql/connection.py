# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Lazy single-handle connection provider."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from ..config import ConnectionConfig
from ..errors import DbConnectionError
from .adapters import DbAdapter, get_adapter
from .statement import PreparedStatement

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class Connection:
    """Lazily opens and keeps one physical database handle.

    The handle is opened on first use and reused by every statement
    prepared afterwards; there is no pooling, reconnection or health check.
    Statements run in autocommit mode unless wrapped in transaction().

    Usage:
        connection = Connection(ConnectionConfig(driver="sqlite", name="app.db"))
        stmt = await connection.prepare("SELECT COUNT(*) AS total FROM users")
        await stmt.execute()

        async with connection.transaction():
            await Database(connection).from_("users").where("id = 1").delete()
        # COMMIT on success, ROLLBACK on exception

        await connection.close()
    """

    def __init__(self, config: ConnectionConfig | str):
        """Initialize provider.

        Args:
            config: ConnectionConfig or adapter connection string.
        """
        if isinstance(config, ConnectionConfig):
            self.config: ConnectionConfig | None = config
            self.connection_string = config.connection_string()
        else:
            self.config = None
            self.connection_string = config
        self.adapter: DbAdapter = get_adapter(self.connection_string)
        self._conn: Any = None

    @property
    def is_open(self) -> bool:
        """True once the physical handle has been opened."""
        return self._conn is not None

    async def get_connection(self) -> Any:
        """Return the physical handle, opening it on first call.

        Raises:
            DbConnectionError: If the handle cannot be established.
        """
        if self._conn is None:
            logger.debug("Opening database handle (%s)", type(self.adapter).__name__)
            try:
                self._conn = await self.adapter.connect()
            except (*self.adapter.driver_errors, OSError) as e:
                raise DbConnectionError(f"Connection failed: {e}") from e
        return self._conn

    async def prepare(self, sql: str) -> PreparedStatement:
        """Return a statement bound to the physical handle."""
        conn = await self.get_connection()
        return PreparedStatement(self.adapter, conn, sql)

    async def close(self) -> None:
        """Close the handle; a later get_connection() opens a new one."""
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await self.adapter.close(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Connection]:
        """Explicit transaction: BEGIN, then COMMIT or ROLLBACK on exception."""
        conn = await self.get_connection()
        await self.adapter.begin(conn)
        try:
            yield self
        except Exception:
            await self.adapter.rollback(conn)
            raise
        await self.adapter.commit(conn)

    async def __aenter__(self) -> Connection:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = ["Connection"]
