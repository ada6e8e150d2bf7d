# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Connection configuration for chainsql.

This module defines:
- ConnectionConfig: Dataclass with the static connection settings
- config_from_env(): Factory to build config from CHAINSQL_* env vars

Configuration via environment variables:
    CHAINSQL_DRIVER: Database driver (sqlite, pgsql, postgresql, postgres)
    CHAINSQL_HOST: Server host (default: localhost)
    CHAINSQL_NAME: Database name, or file path for SQLite
    CHAINSQL_USER: User name
    CHAINSQL_PASSWORD: Password
    CHAINSQL_PORT: Server port
    CHAINSQL_CHARSET: Client charset (default: utf8)

Usage:
    config = ConnectionConfig(driver="pgsql", host="db", name="app", user="app")
    db = Database(config)

    # Original record layout, "pass" included:
    config = ConnectionConfig.from_mapping({"driver": "sqlite", "name": "app.db"})
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any
from urllib.parse import quote

SQLITE_DRIVERS = frozenset({"sqlite", "sqlite3"})
POSTGRES_DRIVERS = frozenset({"pgsql", "postgresql", "postgres"})


@dataclass
class ConnectionConfig:
    """Static connection settings.

    Attributes:
        driver: Database driver name.
        host: Server host (ignored for SQLite).
        name: Database name, or database file path for SQLite.
        user: User name (ignored for SQLite).
        password: Password (ignored for SQLite).
        port: Server port as string (ignored for SQLite).
        charset: Client encoding (ignored for SQLite).
    """

    driver: str = "sqlite"
    host: str = "localhost"
    name: str = ":memory:"
    user: str = ""
    password: str = ""
    port: str = ""
    charset: str = "utf8"

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> ConnectionConfig:
        """Build a config from a plain dict, accepting ``pass`` for the password."""
        data = dict(mapping)
        if "pass" in data:
            data.setdefault("password", data.pop("pass"))
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown connection settings: {', '.join(sorted(unknown))}")
        return cls(**{key: str(value) for key, value in data.items()})

    def connection_string(self) -> str:
        """Return the adapter connection string for this config.

        Raises:
            ValueError: If the driver is not supported.
        """
        driver = self.driver.lower()
        if driver in SQLITE_DRIVERS:
            return f"sqlite:{self.name}"
        if driver in POSTGRES_DRIVERS:
            auth = quote(self.user, safe="")
            if self.password:
                auth += ":" + quote(self.password, safe="")
            netloc = f"{auth}@{self.host}" if auth else self.host
            if self.port:
                netloc += f":{self.port}"
            dsn = f"postgresql://{netloc}/{self.name}"
            if self.charset:
                dsn += f"?client_encoding={self.charset}"
            return dsn
        raise ValueError(
            f"Unsupported driver: '{self.driver}'. Supported: sqlite, pgsql, postgresql"
        )


def config_from_env() -> ConnectionConfig:
    """Build ConnectionConfig from CHAINSQL_* environment variables.

    Unset variables fall back to the ConnectionConfig defaults.
    """
    defaults = ConnectionConfig()
    return ConnectionConfig(
        driver=os.environ.get("CHAINSQL_DRIVER", defaults.driver),
        host=os.environ.get("CHAINSQL_HOST", defaults.host),
        name=os.environ.get("CHAINSQL_NAME", defaults.name),
        user=os.environ.get("CHAINSQL_USER", defaults.user),
        password=os.environ.get("CHAINSQL_PASSWORD", defaults.password),
        port=os.environ.get("CHAINSQL_PORT", defaults.port),
        charset=os.environ.get("CHAINSQL_CHARSET", defaults.charset),
    )


__all__ = ["ConnectionConfig", "config_from_env"]
