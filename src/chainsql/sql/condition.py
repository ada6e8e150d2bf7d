# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Condition strings to (column, operator, value) triples and WHERE fragments.

Grammar (no OR, no parentheses, every predicate ANDed):

    conditions := fragment ("," fragment)*
    fragment   := column operator value
    column     := word characters
    operator   := "!=" | ">=" | "<=" | "<>" | "=" | ">" | "<"
    value      := any non-empty text up to the next comma, trimmed

Example:
    parser = ConditionParser()
    parser.parse("age >= 18, status = active")
    # [Condition("age", ">=", "18"), Condition("status", "=", "active")]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, NamedTuple

from ..errors import ConditionParseError
from .binder import sanitize

if TYPE_CHECKING:
    from .binder import ParameterBinder

logger = logging.getLogger(__name__)

# Longer operators first so "<=" is never read as "<" followed by "=..."
OPERATORS = ("!=", ">=", "<=", "<>", "=", ">", "<")

_FRAGMENT_RE = re.compile(
    r"^\s*(\w+)\s*(" + "|".join(re.escape(op) for op in OPERATORS) + r")(.*)$",
    re.DOTALL,
)


class Condition(NamedTuple):
    """One parsed comparison predicate."""

    column: str
    operator: str
    value: str


class ConditionParser:
    """Tokenizer and triple emitter for condition strings.

    By default a fragment that does not match the grammar is skipped and
    logged at WARNING level; with ``strict=True`` it raises
    ConditionParseError instead. Blank fragments (e.g. a trailing comma)
    are always ignored.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def tokenize(self, text: str) -> Iterator[str]:
        """Yield the non-blank comma-separated fragments."""
        for fragment in text.split(","):
            if fragment.strip():
                yield fragment

    def parse_fragment(self, fragment: str) -> Condition | None:
        """Parse one fragment; None if it does not match the grammar."""
        match = _FRAGMENT_RE.match(fragment)
        if match is None:
            return None
        column, operator, value = match.groups()
        value = value.strip()
        if not value:
            return None
        return Condition(sanitize(column), operator, value)

    def parse(self, text: str) -> list[Condition]:
        """Parse a condition string into triples, in input order.

        Raises:
            ConditionParseError: On a malformed fragment when strict.
        """
        conditions: list[Condition] = []
        for fragment in self.tokenize(text):
            condition = self.parse_fragment(fragment)
            if condition is None:
                if self.strict:
                    raise ConditionParseError(fragment.strip())
                logger.warning("Ignoring malformed condition: '%s'", fragment.strip())
                continue
            conditions.append(condition)
        return conditions


def render_where(
    conditions: list[Condition],
    binder: ParameterBinder,
    quote: Callable[[str], str],
) -> tuple[str, list[str]]:
    """Build the WHERE fragment and register each value with the binder.

    Args:
        conditions: Parsed triples.
        binder: Receives one ``:<column>_where`` placeholder per triple.
        quote: Identifier quoting function of the adapter.

    Returns:
        (where_sql, placeholder_names); where_sql is "" without conditions.
    """
    if not conditions:
        return "", []

    parts = []
    names = []
    for column, operator, value in conditions:
        name = binder.add(f"{column}_where", value)
        parts.append(f"{quote(column)} {operator} {name}")
        names.append(name)

    return "WHERE " + " AND ".join(parts), names


__all__ = ["Condition", "ConditionParser", "OPERATORS", "render_where"]
