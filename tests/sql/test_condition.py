# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for sql.condition module - condition parsing and WHERE rendering."""

from __future__ import annotations

import logging

import pytest

from chainsql.errors import ConditionParseError
from chainsql.sql.binder import ParameterBinder
from chainsql.sql.condition import OPERATORS, Condition, ConditionParser, render_where


def quote(name: str) -> str:
    return f'"{name}"'


class TestConditionParser:
    """Tests for ConditionParser.parse()."""

    def test_two_predicates(self):
        """Comma separates predicates, order is kept."""
        result = ConditionParser().parse("age >= 18, status = active")
        assert result == [
            Condition("age", ">=", "18"),
            Condition("status", "=", "active"),
        ]

    @pytest.mark.parametrize("op", OPERATORS)
    def test_every_operator(self, op):
        """Each recognized operator is read whole, with or without spaces."""
        assert ConditionParser().parse(f"score {op} 5") == [Condition("score", op, "5")]
        assert ConditionParser().parse(f"score{op}5") == [Condition("score", op, "5")]

    def test_longer_operators_not_shadowed(self):
        """<> and <= are not split into < plus a value."""
        result = ConditionParser().parse("a <> 1, b <= 2, c >= 3, d != 4")
        assert [c.operator for c in result] == ["<>", "<=", ">=", "!="]
        assert [c.value for c in result] == ["1", "2", "3", "4"]

    def test_values_are_raw_trimmed_text(self):
        """Values are not evaluated, only trimmed."""
        result = ConditionParser().parse("name =   'Ann Lee'  , age > 18 ")
        assert result[0].value == "'Ann Lee'"
        assert result[1].value == "18"
        assert isinstance(result[1].value, str)

    def test_blank_fragments_ignored(self):
        """Empty input and trailing commas produce no predicates."""
        assert ConditionParser(strict=True).parse("") == []
        assert ConditionParser(strict=True).parse("id = 1, ") == [Condition("id", "=", "1")]

    def test_malformed_fragments_skipped(self, caplog):
        """Fragments without a recognized operator are dropped with a warning."""
        with caplog.at_level(logging.WARNING, logger="chainsql.sql.condition"):
            result = ConditionParser().parse("age >= 18, nonsense, status =, = 5, name = Ann")
        assert result == [Condition("age", ">=", "18"), Condition("name", "=", "Ann")]
        assert "nonsense" in caplog.text
        assert caplog.text.count("Ignoring malformed condition") == 3

    def test_strict_raises(self):
        """strict=True turns a malformed fragment into ConditionParseError."""
        with pytest.raises(ConditionParseError, match="nonsense") as exc_info:
            ConditionParser(strict=True).parse("age >= 18, nonsense")
        assert exc_info.value.fragment == "nonsense"
        assert isinstance(exc_info.value, ValueError)

    def test_dotted_column_is_malformed(self):
        """Only plain word identifiers are accepted as columns."""
        assert ConditionParser().parse("users.age = 1") == []


class TestRenderWhere:
    """Tests for render_where()."""

    def test_empty(self):
        """No conditions give an empty fragment and no placeholders."""
        binder = ParameterBinder()
        assert render_where([], binder, quote) == ("", [])
        assert len(binder) == 0

    def test_fragment_and_placeholders(self):
        """Each triple renders as quoted column, operator, :column_where."""
        binder = ParameterBinder()
        conditions = ConditionParser().parse("age >= 18, status = active")
        sql, names = render_where(conditions, binder, quote)
        assert sql == 'WHERE "age" >= :age_where AND "status" = :status_where'
        assert names == [":age_where", ":status_where"]
        assert binder.placeholders == [(":age_where", "18"), (":status_where", "active")]

    def test_n_valid_m_invalid_yields_n_unique(self):
        """N valid predicates among invalid ones give N unique placeholders."""
        text = "age > 1, junk, age < 90, , also junk, status = a, status != b"
        binder = ParameterBinder()
        conditions = ConditionParser().parse(text)
        sql, names = render_where(conditions, binder, quote)
        assert len(conditions) == 4
        assert len(set(names)) == 4
        assert names == [":age_where", ":age_where_2", ":status_where", ":status_where_2"]
        assert sql.count(" AND ") == 3
