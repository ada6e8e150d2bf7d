# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Base adapter class for async database backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

FETCH_ALL = "all"
FETCH_ONE = "one"


@dataclass
class StatementResult:
    """Buffered outcome of one executed statement.

    Attributes:
        rows: Result rows as dicts (empty for statements returning no rows;
            at most one row when run with FETCH_ONE).
        rowcount: Affected row count reported by the driver.
        lastrowid: Identifier generated by an INSERT, if any.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Any = None


class DbAdapter(ABC):
    """Abstract base class for async database adapters.

    An adapter owns everything driver specific:
    - Opening and closing the physical handle (connect, close)
    - Running one statement with named parameters (run)
    - Explicit transaction control (begin, commit, rollback)
    - Dialect details (identifier quoting, insert id retrieval, bare OFFSET)

    Statements are written with ``:name`` placeholders. Subclasses whose
    driver uses another style override ``placeholder``, which _placeholder()
    fills in. ``driver_errors`` lists the exception classes the driver
    raises; the connection layer turns them into chainsql errors.
    """

    placeholder: str = ":name"
    driver_errors: tuple[type[BaseException], ...] = ()

    @abstractmethod
    async def connect(self) -> Any:
        """Open the physical database handle (autocommit mode)."""
        ...

    @abstractmethod
    async def close(self, conn: Any) -> None:
        """Close the physical database handle."""
        ...

    @abstractmethod
    async def run(
        self, conn: Any, query: str, params: dict[str, Any], fetch: str = FETCH_ALL
    ) -> StatementResult:
        """Execute one statement with named params and buffer its outcome.

        With fetch=FETCH_ONE only the first result row is read.
        """
        ...

    @abstractmethod
    async def begin(self, conn: Any) -> None:
        """Start an explicit transaction on the handle."""
        ...

    @abstractmethod
    async def commit(self, conn: Any) -> None:
        """Commit the explicit transaction."""
        ...

    @abstractmethod
    async def rollback(self, conn: Any) -> None:
        """Roll back the explicit transaction."""
        ...

    # -------------------------------------------------------------------------
    # SQL Helpers
    # -------------------------------------------------------------------------

    def quote_name(self, name: str) -> str:
        """Return quoted SQL identifier, dotted names quoted per part.

        ``*`` is returned as is.
        """
        if name == "*":
            return name
        return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))

    def insert_suffix(self, pk_col: str) -> str:
        """Return the clause appended to INSERT to retrieve the generated id."""
        return ""

    def offset_without_limit(self) -> str:
        """Return the LIMIT clause required in front of an OFFSET with no LIMIT."""
        return ""

    def _placeholder(self, name: str) -> str:
        """Return the driver placeholder for a named parameter."""
        return self.placeholder.replace("name", name)
