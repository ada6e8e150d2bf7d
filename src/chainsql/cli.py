# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""CLI entry point for chainsql (chainsql command).

Small read-only console over the fluent API, handy to inspect a database.

Commands:
    select: Print matching rows as a table
    count: Print the number of matching rows
    version: Show version info

The database defaults to the CHAINSQL_* environment configuration and can be
overridden with --db (any connection string, e.g. "sqlite:/data/app.db").
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import config_from_env
from .database import Database
from .errors import ChainSqlError

console = Console()

T = TypeVar("T")


def _connection_string(db: str | None) -> str:
    return db or config_from_env().connection_string()


def _parse_order(specs: tuple[str, ...]) -> dict[str, str]:
    """Turn ("name", "age:desc") into {"name": "ASC", "age": "desc"}."""
    order: dict[str, str] = {}
    for spec in specs:
        column, _, direction = spec.partition(":")
        order[column] = direction or "ASC"
    return order


def _run(db_url: str | None, work: Callable[[Database], Awaitable[T]]) -> T:
    """Run work against a Database, exit 1 on errors."""

    async def runner() -> T:
        async with Database(_connection_string(db_url)) as db:
            return await work(db)

    try:
        return asyncio.run(runner())
    except (ChainSqlError, ValueError) as e:
        console.print(f"[red]error: {escape(str(e))}[/red]")
        sys.exit(1)


def _print_rows(title: str, rows: list[dict[str, Any]]) -> None:
    if not rows:
        console.print("[dim]No rows found.[/dim]")
        return

    table = Table(title=title)
    for column in rows[0]:
        table.add_column(str(column), style="cyan" if column == "id" else None)
    for row in rows:
        table.add_row(*("[dim]NULL[/dim]" if v is None else escape(str(v)) for v in row.values()))
    console.print(table)


# ============================================================================
# CLI Commands
# ============================================================================


@click.group()
@click.version_option(package_name="chainsql")
@click.option("--db", default=None, help="Connection string. Default: CHAINSQL_* environment.")
@click.pass_context
def main(ctx: click.Context, db: str | None) -> None:
    """chainsql - fluent SQL statements from the command line."""
    ctx.obj = db


@main.command("select")
@click.argument("table")
@click.option("--where", "-w", "condition", default=None, help='Conditions, e.g. "age >= 18, status = active".')
@click.option("--column", "-c", "columns", multiple=True, help="Column to select (repeatable).")
@click.option("--order-by", "-o", "order", multiple=True, help="COLUMN[:asc|desc] (repeatable).")
@click.option("--limit", "-l", type=int, default=None, help="Maximum number of rows.")
@click.option("--page", "-p", type=int, default=None, help="Page number (requires --limit).")
@click.option("--one", is_flag=True, help="Return only the first matching row.")
@click.option("--strict", is_flag=True, help="Fail on malformed conditions instead of skipping them.")
@click.pass_obj
def select_cmd(
    db_url: str | None,
    table: str,
    condition: str | None,
    columns: tuple[str, ...],
    order: tuple[str, ...],
    limit: int | None,
    page: int | None,
    one: bool,
    strict: bool,
) -> None:
    """Print rows of TABLE."""
    if page is not None and limit is None:
        raise click.UsageError("--page requires --limit")

    async def work(db: Database) -> Any:
        query = db.from_(table)
        if condition:
            query.where(condition, strict=strict)
        if order:
            query.order_by(_parse_order(order))
        if limit is not None:
            query.limit(limit, page)
        return await query.select(all_rows=not one, columns=list(columns))

    result = _run(db_url, work)
    if result is None:
        rows = []
    elif isinstance(result, dict):
        rows = [result]
    else:
        rows = result
    _print_rows(table, rows)


@main.command("count")
@click.argument("table")
@click.option("--where", "-w", "condition", default=None, help="Conditions to filter counted rows.")
@click.pass_obj
def count_cmd(db_url: str | None, table: str, condition: str | None) -> None:
    """Print the number of rows of TABLE."""

    async def work(db: Database) -> Any:
        query = db.from_(table)
        if condition:
            query.where(condition)
        return await query.count()

    console.print(str(_run(db_url, work)))


@main.command("version")
def version_cmd() -> None:
    """Show version information."""
    from chainsql import __version__

    console.print(f"chainsql {__version__}")


if __name__ == "__main__":
    main()
