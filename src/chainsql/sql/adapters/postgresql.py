# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""PostgreSQL async adapter using psycopg3.

One autocommit AsyncConnection per adapter handle, no pooling.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Iterable
from typing import Any

from .base import FETCH_ALL, FETCH_ONE, DbAdapter, StatementResult

# Quoted text, a :name placeholder (not a :: cast), or a literal %
_TOKEN_RE = re.compile(
    r"(?P<quoted>\"(?:[^\"]|\"\")*\"|'(?:[^']|'')*')"
    r"|(?<!:):(?P<name>[A-Za-z0-9_]+)"
    r"|%"
)


class PostgresAdapter(DbAdapter):
    """PostgreSQL async adapter.

    Uses :name placeholders converted to %(name)s. Inserts are suffixed
    with RETURNING so the generated key comes back as a result row.
    """

    placeholder = "%(name)s"

    def __init__(self, dsn: str, connect_timeout: float = 10.0):
        self.dsn = dsn
        self.connect_timeout = connect_timeout

        # Verify psycopg is available at init time
        try:
            import psycopg
        except ImportError as e:
            raise ImportError(
                "PostgreSQL support requires psycopg. "
                "Install with: pip install chainsql[postgresql]"
            ) from e
        self.driver_errors = (psycopg.Error,)

    def _convert_placeholders(self, query: str, names: Iterable[str]) -> str:
        """Convert the bound :name placeholders to %(name)s for psycopg.

        Quoted identifiers and string literals are copied as they are, and
        literal % signs are doubled so psycopg does not read them as markers.
        """
        names = set(names)

        def replace(match: re.Match[str]) -> str:
            quoted, name = match.group("quoted"), match.group("name")
            if quoted is not None:
                return quoted.replace("%", "%%")
            if name is None:
                return "%%"
            return self._placeholder(name) if name in names else match.group(0)

        return _TOKEN_RE.sub(replace, query)

    async def connect(self) -> Any:
        """Open an autocommit connection."""
        from psycopg import AsyncConnection

        try:
            return await asyncio.wait_for(
                AsyncConnection.connect(self.dsn, autocommit=True),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"PostgreSQL connection timed out after {self.connect_timeout}s. "
                "Check credentials and server availability."
            ) from None

    async def close(self, conn: Any) -> None:
        """Close the connection."""
        await conn.close()

    async def run(
        self, conn: Any, query: str, params: dict[str, Any], fetch: str = FETCH_ALL
    ) -> StatementResult:
        """Execute query, buffer rows and the RETURNING key of an insert."""
        from psycopg.rows import dict_row

        query = self._convert_placeholders(query, params)
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(query, params)
            rows = []
            if cur.description and fetch == FETCH_ONE:
                row = await cur.fetchone()
                rows = [row] if row is not None else []
            elif cur.description:
                rows = await cur.fetchall()
            lastrowid = None
            if rows and query.lstrip().upper().startswith("INSERT") and " RETURNING " in query:
                lastrowid = next(iter(rows[0].values()))
            return StatementResult(rows=rows, rowcount=cur.rowcount, lastrowid=lastrowid)

    async def begin(self, conn: Any) -> None:
        """Start explicit transaction."""
        await conn.execute("BEGIN")

    async def commit(self, conn: Any) -> None:
        """Commit transaction on connection."""
        await conn.execute("COMMIT")

    async def rollback(self, conn: Any) -> None:
        """Rollback transaction on connection."""
        await conn.execute("ROLLBACK")

    def insert_suffix(self, pk_col: str) -> str:
        """Return RETURNING clause for the primary key."""
        return f"RETURNING {self.quote_name(pk_col)}"
