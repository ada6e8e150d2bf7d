# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for chainsql.

Driver exceptions are caught at the connection/statement boundary and
re-raised as one of these, with the original exception chained.
"""

from __future__ import annotations


class ChainSqlError(Exception):
    """Base class for every error raised by chainsql."""


class DbConnectionError(ChainSqlError, ConnectionError):
    """The physical database handle could not be established."""


class StatementError(ChainSqlError):
    """Prepare, bind or execute failed.

    Attributes:
        sql: The SQL text that was being executed, if known.
    """

    def __init__(self, message: str, sql: str | None = None):
        super().__init__(message)
        self.sql = sql


class ConditionParseError(ChainSqlError, ValueError):
    """A WHERE fragment does not match ``column operator value``."""

    def __init__(self, fragment: str):
        super().__init__(f"Malformed condition: '{fragment}'")
        self.fragment = fragment


class QueryStateError(ChainSqlError, RuntimeError):
    """Terminal operation called on a query with no target table."""


__all__ = [
    "ChainSqlError",
    "ConditionParseError",
    "DbConnectionError",
    "QueryStateError",
    "StatementError",
]
