"""Tests for the numeric expression parser and predicate builder."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from model_filter.numeric_expression import (
    NumericExpression,
    build_numeric_predicate,
    parse_numeric_expression,
)
from model_filter.operators import ComparisonOperator, LogicalOperator
from model_filter.predicates import Between, Comparison, apply_predicates

# =============================================================================
# Parsing
# =============================================================================


def test_parse_points_and_range() -> None:
    """Points and ranges are separated and converted to floats."""
    expr = parse_numeric_expression("1, 2, 5-7.3")
    assert expr.points == frozenset({1.0, 2.0})
    assert expr.ranges == frozenset({(5.0, 7.3)})


def test_parse_is_order_independent() -> None:
    """Reordering tokens yields the same sets."""
    assert parse_numeric_expression("1, 2, 5-7.3") == parse_numeric_expression("5-7.3, 2, 1")


def test_parse_swapped_bounds_normalize() -> None:
    """A range written high-low is normalized to (min, max)."""
    assert parse_numeric_expression("7.3-5") == parse_numeric_expression("5-7.3")


def test_parse_whitespace_inside_token_is_ignored() -> None:
    """Spaces around the hyphen do not matter."""
    expr = parse_numeric_expression("5 - 7.3")
    assert expr.ranges == frozenset({(5.0, 7.3)})
    assert expr.points == frozenset()


def test_parse_deduplicates() -> None:
    """Repeated points and ranges collapse."""
    expr = parse_numeric_expression("3, 3.0, 1-2, 2-1")
    assert expr.points == frozenset({3.0})
    assert expr.ranges == frozenset({(1.0, 2.0)})


def test_parse_strips_noise_characters() -> None:
    """Currency symbols and letters are discarded before parsing."""
    expr = parse_numeric_expression("$12, 4kg-9kg")
    assert expr.points == frozenset({12.0})
    assert expr.ranges == frozenset({(4.0, 9.0)})


@pytest.mark.parametrize("text", ["abc", "", "   ", ",,,", "1.2.3", "-", "..."])
def test_parse_garbage_yields_nothing(text: str) -> None:
    """Tokens without a usable number are dropped, never raised."""
    assert parse_numeric_expression(text).is_empty()


def test_parse_none_is_empty() -> None:
    assert parse_numeric_expression(None) == NumericExpression()


def test_parse_leading_hyphen_is_not_a_sign() -> None:
    """'-5' is a range with an empty side, so it is dropped."""
    expr = parse_numeric_expression("-5, 5-, 8")
    assert expr.points == frozenset({8.0})
    assert expr.ranges == frozenset()


def test_parse_equal_bounds_become_point() -> None:
    expr = parse_numeric_expression("4-4")
    assert expr.points == frozenset({4.0})
    assert expr.ranges == frozenset()


def test_parse_multiple_hyphens_use_min_and_max() -> None:
    expr = parse_numeric_expression("9-1-4")
    assert expr.ranges == frozenset({(1.0, 9.0)})


# =============================================================================
# Predicate building
# =============================================================================


def test_build_non_negated_is_or_of_inclusions() -> None:
    """Points become one IN leaf, ranges become BETWEEN leaves, joined by OR."""
    node = build_numeric_predicate("1, 2, 5 - 7.3", "id")
    assert node.operator == LogicalOperator.OR
    assert node.children == (
        Comparison("id", ComparisonOperator.IN_SET, [1.0, 2.0]),
        Between("id", 5.0, 7.3),
    )


def test_build_negated_is_and_of_exclusions() -> None:
    node = build_numeric_predicate("1, 2, 5 - 7.3", "id", negate=True)
    assert node.operator == LogicalOperator.AND
    assert node.children == (
        Comparison("id", ComparisonOperator.NOT_IN_SET, [1.0, 2.0]),
        Between("id", 5.0, 7.3, negate=True),
    )


def test_build_single_point_collapses_to_equality() -> None:
    node = build_numeric_predicate("4", "qty")
    assert node.children == (Comparison("qty", ComparisonOperator.EQUAL, 4.0),)
    negated = build_numeric_predicate("4", "qty", negate=True)
    assert negated.children == (Comparison("qty", ComparisonOperator.NOT_EQUAL, 4.0),)


def test_build_empty_is_no_op(parts) -> None:
    """All-garbage input gives an empty conjunction that adds no WHERE clause."""
    node = build_numeric_predicate("abc", "price")
    assert not node
    assert node.to_clause(parts) is None
    stmt = apply_predicates(select(parts), parts, [node])
    assert stmt.whereclause is None


# =============================================================================
# Against a database
# =============================================================================


def test_end_to_end_inclusion(parts, fetch_ids) -> None:
    """price IN (1, 2) OR price BETWEEN 5 AND 7.3."""
    node = build_numeric_predicate("1, 2, 5 - 7.3", "price")
    stmt = apply_predicates(select(parts), parts, [node])
    assert fetch_ids(stmt) == [1, 2, 4, 5, 6]


def test_end_to_end_exclusion(parts, fetch_ids) -> None:
    """price NOT IN (1, 2) AND (price < 5 OR price > 7.3)."""
    node = build_numeric_predicate("1, 2, 5 - 7.3", "price", negate=True)
    stmt = apply_predicates(select(parts), parts, [node])
    assert fetch_ids(stmt) == [3, 7, 8, 9, 10]


@pytest.mark.parametrize("text", ["1, 2, 5-7.3", "12", "3-8, 20", "0.5-1.5, 10-12"])
def test_negation_is_complement(parts, fetch_ids, text: str) -> None:
    """Negated and non-negated results partition the table (no NULL prices)."""
    included = fetch_ids(apply_predicates(select(parts), parts, [build_numeric_predicate(text, "price")]))
    excluded = fetch_ids(
        apply_predicates(select(parts), parts, [build_numeric_predicate(text, "price", negate=True)])
    )
    assert set(included).isdisjoint(excluded)
    assert sorted(included + excluded) == list(range(1, 11))
