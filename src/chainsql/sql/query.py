# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Async query builder with fluent API and string conditions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import QueryStateError
from .adapters.base import FETCH_ALL, FETCH_ONE
from .binder import ParameterBinder, SqlValue, sanitize
from .condition import ConditionParser, render_where

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .connection import Connection
    from .statement import PreparedStatement

logger = logging.getLogger(__name__)

DIRECTIONS = frozenset({"ASC", "DESC"})


class Query:
    """Fluent statement builder for one table, one statement at a time.

    Configuration methods mutate the query and return it, so calls chain.
    A terminal operation (select, insert, update, delete or an aggregate)
    assembles the SQL, binds the accumulated placeholders, executes, and
    consumes the query: its table, clauses and placeholders are cleared and
    from_() must be called again before the next terminal operation.

    Usage:
        adults = await (
            db.from_("users")
            .where("age >= 18, status = active")
            .order_by({"name": "ASC"})
            .limit(10, page=2)
            .select(all_rows=True)
        )
        user_id = await db.from_("users").insert({"name": "Ann", "age": 30})
        await db.from_("users").where(f"id = {user_id}").update({"age": 31})
        total = await db.from_("users").where("status = active").count()
    """

    def __init__(self, connection: Connection, pkey: str = "id"):
        """Initialize Query.

        Args:
            connection: Provider of the physical handle.
            pkey: Primary key column, used to return ids of inserted rows.
        """
        self.connection = connection
        self.adapter = connection.adapter
        self.pkey = pkey
        self.binder = ParameterBinder()
        self.table = ""
        self._where_names: list[str] = []
        self._clear_clauses()

    def _clear_clauses(self) -> None:
        self.where_clause = ""
        self.group_by_clause = ""
        self.order_by_clause = ""
        self.limit_clause = ""
        self.offset_clause = ""

    def _reset(self) -> None:
        """Consume the session."""
        self.table = ""
        self._where_names = []
        self._clear_clauses()
        self.binder.reset()

    def _identifier(self, name: str) -> str:
        """Sanitize then quote an identifier."""
        return self.adapter.quote_name(str(sanitize(name)))

    # -------------------------------------------------------------------------
    # Fluent configuration
    # -------------------------------------------------------------------------

    def from_(self, table: str) -> Query:
        """Start a new statement on table; drops all accumulated state."""
        self._reset()
        self.table = self._identifier(table)
        return self

    def where(self, condition: str, strict: bool = False) -> Query:
        """Set WHERE from a condition string like ``"age >= 18, status = active"``.

        A second call replaces the previous conditions.

        Args:
            condition: Comma-separated ``column operator value`` predicates.
            strict: Raise ConditionParseError on a malformed predicate
                instead of skipping it.
        """
        conditions = ConditionParser(strict=strict).parse(condition)
        self.binder.discard(self._where_names)
        self.where_clause, self._where_names = render_where(
            conditions, self.binder, self.adapter.quote_name
        )
        return self

    def group_by(self, columns: Iterable[str]) -> Query:
        """Set GROUP BY columns."""
        names = [self._identifier(c) for c in columns]
        self.group_by_clause = f"GROUP BY {', '.join(names)}" if names else ""
        return self

    def order_by(self, columns: Mapping[str, str]) -> Query:
        """Set ORDER BY from an ordered column -> direction mapping.

        Raises:
            ValueError: If a direction is not ASC or DESC.
        """
        parts = []
        for column, direction in columns.items():
            direction = str(sanitize(direction)).strip().upper()
            if direction not in DIRECTIONS:
                raise ValueError(f"Invalid sort direction '{direction}' for column '{column}'")
            parts.append(f"{self._identifier(column)} {direction}")
        self.order_by_clause = f"ORDER BY {', '.join(parts)}" if parts else ""
        return self

    def limit(self, count: int, page: int | None = None) -> Query:
        """Set LIMIT; page > 1 also sets OFFSET to (page - 1) * count."""
        count = _non_negative(count, "limit")
        self.limit_clause = f"LIMIT {count}"
        if page is not None and _non_negative(page, "page") > 1:
            self.offset((page - 1) * count)
        return self

    def offset(self, rows: int) -> Query:
        """Set OFFSET; a later call overrides the previous one."""
        self.offset_clause = f"OFFSET {_non_negative(rows, 'offset')}"
        return self

    # -------------------------------------------------------------------------
    # SQL assembly
    # -------------------------------------------------------------------------

    def _require_table(self) -> str:
        if not self.table:
            raise QueryStateError("No target table. Call from_() before a terminal operation.")
        return self.table

    def _columns_sql(self, columns: Iterable[str] | None) -> str:
        names = [self._identifier(c) for c in columns or ()]
        return ", ".join(names) if names else "*"

    def _paging(self) -> list[str]:
        limit_clause = self.limit_clause
        if self.offset_clause and not limit_clause:
            limit_clause = self.adapter.offset_without_limit()
        return [limit_clause, self.offset_clause]

    @staticmethod
    def _join(*parts: str) -> str:
        return " ".join(part for part in parts if part)

    def to_sql(self, columns: Iterable[str] | None = None) -> str:
        """Return the SELECT the current state would execute."""
        return self._join(
            f"SELECT {self._columns_sql(columns)} FROM {self._require_table()}",
            self.where_clause,
            self.group_by_clause,
            self.order_by_clause,
            *self._paging(),
        )

    def _insert_sql(self, values: Mapping[str, SqlValue]) -> str:
        if not values:
            raise ValueError("insert() requires at least one column")
        columns = []
        placeholders = []
        for column, value in values.items():
            columns.append(self._identifier(column))
            placeholders.append(self.binder.add(_seed(column), value))
        return self._join(
            f"INSERT INTO {self._require_table()} ({', '.join(columns)})",
            f"VALUES ({', '.join(placeholders)})",
            self.adapter.insert_suffix(self.pkey),
        )

    def _update_sql(self, values: Mapping[str, SqlValue]) -> str:
        if not values:
            raise ValueError("update() requires at least one column")
        sets = []
        for column, value in values.items():
            name = self.binder.add(_seed(column), value)
            sets.append(f"{self._identifier(column)} = {name}")
        sql = self._join(
            f"UPDATE {self._require_table()} SET {', '.join(sets)}",
            self.where_clause,
            self.group_by_clause,
            self.order_by_clause,
            self.limit_clause,
        )
        self._warn_unconditional("UPDATE")
        return sql

    def _delete_sql(self) -> str:
        sql = self._join(
            f"DELETE FROM {self._require_table()}",
            self.where_clause,
            self.group_by_clause,
            self.order_by_clause,
            self.limit_clause,
        )
        self._warn_unconditional("DELETE")
        return sql

    def _aggregate_sql(self, operation: str, column: str) -> str:
        return self._join(
            f"SELECT {operation}({self._identifier(column)}) AS total FROM {self._require_table()}",
            self.where_clause,
            self.group_by_clause,
        )

    def _warn_unconditional(self, operation: str) -> None:
        if not self.where_clause:
            logger.warning("%s on %s without WHERE affects every row", operation, self.table)

    # -------------------------------------------------------------------------
    # Terminal operations
    # -------------------------------------------------------------------------

    async def _execute(
        self, build: Callable[..., str], *args: Any, fetch: str = FETCH_ALL
    ) -> PreparedStatement:
        """Assemble, prepare, bind and execute; the session is consumed either way."""
        try:
            sql = build(*args)
            stmt = await self.connection.prepare(sql)
            self.binder.bind(stmt)
            await stmt.execute(fetch=fetch)
            return stmt
        finally:
            self._reset()

    async def select(
        self, all_rows: bool = False, columns: Iterable[str] | None = None
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Execute the SELECT.

        Args:
            all_rows: Return every matching row instead of the first one.
            columns: Columns to select (None or empty = all).

        Returns:
            With all_rows, the list of rows (empty if none matched);
            otherwise the first row, or None if none matched.
        """
        if all_rows:
            stmt = await self._execute(self.to_sql, columns)
            return stmt.fetch_all()
        stmt = await self._execute(self.to_sql, columns, fetch=FETCH_ONE)
        return stmt.fetch_one()

    async def insert(self, values: Mapping[str, SqlValue]) -> Any:
        """Insert one row and return its generated identifier.

        Raises:
            ValueError: If values is empty.
        """
        stmt = await self._execute(self._insert_sql, values, fetch=FETCH_ONE)
        return stmt.last_insert_id()

    async def update(self, values: Mapping[str, SqlValue]) -> bool:
        """Update matching rows; without where() every row is updated.

        Raises:
            ValueError: If values is empty.
        """
        await self._execute(self._update_sql, values)
        return True

    async def delete(self) -> bool:
        """Delete matching rows; without where() the whole table is emptied."""
        await self._execute(self._delete_sql)
        return True

    async def _aggregate(self, operation: str, column: str) -> Any:
        stmt = await self._execute(self._aggregate_sql, operation, column, fetch=FETCH_ONE)
        row = stmt.fetch_one()
        return row["total"] if row else None

    async def count(self, column: str = "*") -> Any:
        """Return COUNT(column) of matching rows."""
        return await self._aggregate("COUNT", column)

    async def sum(self, column: str) -> Any:
        """Return SUM(column) of matching rows."""
        return await self._aggregate("SUM", column)

    async def avg(self, column: str) -> Any:
        """Return AVG(column) of matching rows."""
        return await self._aggregate("AVG", column)

    async def min(self, column: str) -> Any:
        """Return MIN(column) of matching rows."""
        return await self._aggregate("MIN", column)

    async def max(self, column: str) -> Any:
        """Return MAX(column) of matching rows."""
        return await self._aggregate("MAX", column)


def _seed(column: str) -> str:
    """Placeholder seed for a column; the binder maps odd characters to _."""
    return str(sanitize(column))


def _non_negative(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer, got {value!r}")
    return value


__all__ = ["DIRECTIONS", "Query"]
