# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Value sanitization and named-parameter accumulation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .statement import PreparedStatement

SqlValue = str | int | float | bool | None

_TAG_RE = re.compile(r"<[^>]*>")
# "&" not already starting a named or numeric entity
_BARE_AMP_RE = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)")
_ESCAPES = str.maketrans({"<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#039;"})
# Placeholder names stay within what every driver accepts
_SEED_RE = re.compile(r"[^0-9A-Za-z_]")


def sanitize(value: SqlValue) -> SqlValue:
    """Strip markup from text and escape HTML-special characters.

    Existing entities are not encoded again, so the function is idempotent.
    Numbers, booleans and None are returned unchanged.

    Raises:
        TypeError: If value is not one of str, int, float, bool, None.
    """
    _check_type(value)
    if not isinstance(value, str):
        return value
    text = _TAG_RE.sub("", value)
    text = _BARE_AMP_RE.sub("&amp;", text)
    return text.translate(_ESCAPES)


def _check_type(value: SqlValue) -> None:
    if value is not None and not isinstance(value, (str, bool, int, float)):
        raise TypeError(
            f"Unsupported value type {type(value).__name__}; "
            "expected str, int, float, bool or None"
        )


class ParameterBinder:
    """Ordered (placeholder, raw value) pairs for the statement being built.

    Placeholder names are derived from a seed and made unique within the
    binder: the first ``age_where`` is ``:age_where``, the next one
    ``:age_where_2``. Characters outside ``[0-9A-Za-z_]`` in a seed become
    ``_``, so ``età_where`` registers as ``:et__where``. Values are kept raw
    and sanitized only when bound.
    """

    def __init__(self) -> None:
        self.placeholders: list[tuple[str, SqlValue]] = []

    def __len__(self) -> int:
        return len(self.placeholders)

    def __iter__(self) -> Iterator[tuple[str, SqlValue]]:
        return iter(self.placeholders)

    @property
    def names(self) -> list[str]:
        """Placeholder names in accumulation order."""
        return [name for name, _ in self.placeholders]

    def add(self, seed: str, value: SqlValue) -> str:
        """Register value under a unique placeholder derived from seed.

        Returns:
            The placeholder name, colon included.

        Raises:
            TypeError: If value is not one of str, int, float, bool, None.
        """
        _check_type(value)
        seed = _SEED_RE.sub("_", seed) or "param"
        taken = set(self.names)
        name = f":{seed}"
        suffix = 2
        while name in taken:
            name = f":{seed}_{suffix}"
            suffix += 1
        self.placeholders.append((name, value))
        return name

    def discard(self, names: Iterable[str]) -> None:
        """Drop the given placeholders."""
        dropped = set(names)
        self.placeholders = [pair for pair in self.placeholders if pair[0] not in dropped]

    def reset(self) -> None:
        """Forget every placeholder."""
        self.placeholders = []

    def bind(self, statement: PreparedStatement) -> PreparedStatement:
        """Sanitize and bind every pair, in accumulation order."""
        for name, value in self.placeholders:
            statement.bind_value(name, sanitize(value))
        return statement


__all__ = ["ParameterBinder", "SqlValue", "sanitize"]
