# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQLite async adapter using aiosqlite."""

from __future__ import annotations

from typing import Any

import aiosqlite

from .base import FETCH_ALL, FETCH_ONE, DbAdapter, StatementResult


class SqliteAdapter(DbAdapter):
    """SQLite async adapter.

    Uses :name placeholders natively. The handle is opened with
    ``isolation_level=None`` so every statement autocommits unless an
    explicit transaction was started with begin().
    """

    driver_errors = (aiosqlite.Error,)

    def __init__(self, db_path: str):
        self.db_path = db_path or ":memory:"

    async def connect(self) -> aiosqlite.Connection:
        """Open the database file."""
        return await aiosqlite.connect(self.db_path, isolation_level=None)

    async def close(self, conn: aiosqlite.Connection) -> None:
        """Close the database file."""
        await conn.close()

    async def run(
        self,
        conn: aiosqlite.Connection,
        query: str,
        params: dict[str, Any],
        fetch: str = FETCH_ALL,
    ) -> StatementResult:
        """Execute query, buffer rows, rowcount and lastrowid."""
        async with conn.execute(query, params) as cursor:
            if fetch == FETCH_ONE:
                row = await cursor.fetchone()
                rows = [row] if row is not None else []
            else:
                rows = await cursor.fetchall()
            cols = [c[0] for c in cursor.description] if cursor.description else []
            return StatementResult(
                rows=[dict(zip(cols, row, strict=True)) for row in rows],
                rowcount=cursor.rowcount,
                lastrowid=cursor.lastrowid,
            )

    async def begin(self, conn: aiosqlite.Connection) -> None:
        """Start explicit transaction."""
        await conn.execute("BEGIN")

    async def commit(self, conn: aiosqlite.Connection) -> None:
        """Commit transaction on connection."""
        await conn.commit()

    async def rollback(self, conn: aiosqlite.Connection) -> None:
        """Rollback transaction on connection."""
        await conn.rollback()

    def offset_without_limit(self) -> str:
        """SQLite only accepts OFFSET after a LIMIT; -1 means no limit."""
        return "LIMIT -1"
