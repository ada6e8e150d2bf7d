# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""chainsql: fluent, parameterized SQL statements over SQLite and PostgreSQL.

Example:
    from chainsql import Database

    db = Database({"driver": "sqlite", "name": "app.db"})
    adults = await db.from_("users").where("age >= 18, status = active").select(True)
    user_id = await db.from_("users").insert({"name": "Ann", "age": 30})
    await db.close()
"""

from .config import ConnectionConfig, config_from_env
from .database import Database
from .errors import (
    ChainSqlError,
    ConditionParseError,
    DbConnectionError,
    QueryStateError,
    StatementError,
)
from .sql import Connection, PreparedStatement, Query, sanitize

__version__ = "0.1.0"

__all__ = [
    "ChainSqlError",
    "ConditionParseError",
    "Connection",
    "ConnectionConfig",
    "Database",
    "DbConnectionError",
    "PreparedStatement",
    "Query",
    "QueryStateError",
    "StatementError",
    "config_from_env",
    "sanitize",
]
