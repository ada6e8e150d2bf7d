# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for the chainsql command line."""

from __future__ import annotations

import asyncio

import pytest
from click.testing import CliRunner

from chainsql import Database, __version__
from chainsql.cli import _parse_order, main


@pytest.fixture
def db_url(tmp_path) -> str:
    """SQLite database with a small users table."""
    url = f"sqlite:{tmp_path}/cli.db"

    async def seed():
        async with Database(url) as db:
            await db.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER)")
            for name, age in (("Alice", 30), ("Bob", 16), ("Carol", 42)):
                await db.from_("users").insert({"name": name, "age": age})

    asyncio.run(seed())
    return url


def test_parse_order():
    """COLUMN[:dir] specs become an ordered mapping."""
    assert _parse_order(("name", "age:desc")) == {"name": "ASC", "age": "desc"}


def test_select(db_url):
    """select prints matching rows."""
    result = CliRunner().invoke(main, ["--db", db_url, "select", "users", "--where", "age >= 18"])
    assert result.exit_code == 0, result.output
    assert "Alice" in result.output
    assert "Carol" in result.output
    assert "Bob" not in result.output


def test_select_one_ordered(db_url):
    """--one with --order-by prints a single row."""
    result = CliRunner().invoke(
        main, ["--db", db_url, "select", "users", "-o", "age:desc", "--one", "-c", "name"]
    )
    assert result.exit_code == 0, result.output
    assert "Carol" in result.output
    assert "Alice" not in result.output


def test_select_no_rows(db_url):
    """No match prints a notice."""
    result = CliRunner().invoke(main, ["--db", db_url, "select", "users", "-w", "age > 100"])
    assert result.exit_code == 0
    assert "No rows found" in result.output


def test_select_page_requires_limit(db_url):
    """--page alone is a usage error."""
    result = CliRunner().invoke(main, ["--db", db_url, "select", "users", "--page", "2"])
    assert result.exit_code == 2


def test_select_strict_error(db_url):
    """Malformed conditions fail with --strict."""
    result = CliRunner().invoke(
        main, ["--db", db_url, "select", "users", "-w", "garbage", "--strict"]
    )
    assert result.exit_code == 1
    assert "Malformed condition" in result.output


def test_count(db_url):
    """count prints the number of matching rows."""
    result = CliRunner().invoke(main, ["--db", db_url, "count", "users", "-w", "age >= 18"])
    assert result.exit_code == 0
    assert result.output.strip() == "2"


def test_missing_table_exits_1(db_url):
    """Statement errors are printed and exit with status 1."""
    result = CliRunner().invoke(main, ["--db", db_url, "count", "nope"])
    assert result.exit_code == 1
    assert "error" in result.output
    assert "no such table" in result.output


def test_version():
    """version prints the package version."""
    result = CliRunner().invoke(main, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
