# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Prepared statement bound to one physical handle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import StatementError
from .adapters.base import FETCH_ALL

if TYPE_CHECKING:
    from .adapters.base import DbAdapter, StatementResult

logger = logging.getLogger(__name__)


class PreparedStatement:
    """One SQL statement with named values bound before execution.

    Values are bound by name, so binding order is irrelevant. After
    execute() the outcome is buffered: fetch_one(), fetch_all() and
    last_insert_id() read from that buffer. With ``fetch=FETCH_ONE`` the
    driver is asked for the first row only, so fetch_all() holds at most
    one row.

    Usage:
        stmt = await connection.prepare("SELECT * FROM users WHERE id = :id")
        stmt.bind_value(":id", 5)
        await stmt.execute()
        row = stmt.fetch_one()
    """

    def __init__(self, adapter: DbAdapter, conn: Any, sql: str):
        self.adapter = adapter
        self.conn = conn
        self.sql = sql
        self.params: dict[str, Any] = {}
        self._result: StatementResult | None = None

    def bind_value(self, name: str, value: Any) -> None:
        """Bind value to ``:name`` (leading colon optional)."""
        self.params[name.lstrip(":")] = value

    async def execute(self, fetch: str = FETCH_ALL) -> bool:
        """Execute the statement with the bound values.

        Args:
            fetch: FETCH_ALL to buffer every row, FETCH_ONE for the first only.

        Returns:
            True once the statement ran.

        Raises:
            StatementError: If the driver rejects the statement.
        """
        logger.debug("Executing %s with params %s", self.sql, sorted(self.params))
        try:
            self._result = await self.adapter.run(self.conn, self.sql, self.params, fetch)
        except self.adapter.driver_errors as e:
            raise StatementError(f"Statement execution failed: {e}", sql=self.sql) from e
        return True

    @property
    def result(self) -> StatementResult:
        """Buffered outcome; raises StatementError before execute()."""
        if self._result is None:
            raise StatementError("Statement has not been executed", sql=self.sql)
        return self._result

    @property
    def rowcount(self) -> int:
        """Affected row count reported by the driver."""
        return self.result.rowcount

    def fetch_one(self) -> dict[str, Any] | None:
        """Return the first row, or None if the statement returned no rows."""
        rows = self.result.rows
        return rows[0] if rows else None

    def fetch_all(self) -> list[dict[str, Any]]:
        """Return all rows (possibly empty)."""
        return list(self.result.rows)

    def last_insert_id(self) -> Any:
        """Return the identifier generated by an INSERT."""
        return self.result.lastrowid


__all__ = ["PreparedStatement"]
