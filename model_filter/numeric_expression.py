"""
Compact numeric filter expressions for "advanced" fields.

Grammar: comma separated tokens, each a number (``12``) or an inclusive range
(``5-7.3``, bounds in either order). Anything that is not a digit, ``.`` or
``-`` is stripped from a token first, so ``$1,200`` reads as the two tokens
``1`` and ``200`` and ``5 - 7.3`` as ``5-7.3``. Tokens that do not yield a
number are dropped with a log line, never raised.

Known limitation: ``-`` is always the range separator. ``-5`` is a range with
an empty lower side and is dropped; negative numbers cannot be expressed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from .operators import ComparisonOperator, LogicalOperator
from .predicates import Between, Comparison, Conjunction, PredicateNode

log = logging.getLogger(__name__)

_STRIP_PATTERN = re.compile(r"[^0-9.\-]+")


@dataclass(frozen=True)
class NumericExpression:
    points: FrozenSet[float] = frozenset()
    ranges: FrozenSet[Tuple[float, float]] = frozenset()

    def is_empty(self) -> bool:
        return not self.points and not self.ranges


def _parse_float(fragment: str) -> Optional[float]:
    if not fragment:
        return None
    try:
        return float(fragment)
    except ValueError:
        return None


def _parse_piece(piece: str) -> Tuple[Optional[float], Optional[Tuple[float, float]]]:
    """Return ``(point, None)``, ``(None, (low, high))`` or ``(None, None)``."""
    cleaned = _STRIP_PATTERN.sub("", piece)
    if not cleaned:
        return None, None
    fragments = cleaned.split("-")
    numbers = [n for n in (_parse_float(f) for f in fragments) if n is not None]
    if len(fragments) == 1:
        return (numbers[0], None) if numbers else (None, None)
    # hyphenated: both sides must survive
    if len(numbers) < 2:
        return None, None
    low, high = min(numbers), max(numbers)
    if low == high:
        return low, None
    return None, (low, high)


def parse_numeric_expression(text: Optional[str]) -> NumericExpression:
    """Parse ``text`` into deduplicated points and ``(min, max)`` ranges."""
    points = set()
    ranges = set()
    for piece in (text or "").split(","):
        if not piece.strip():
            continue
        point, bounds = _parse_piece(piece)
        if point is not None:
            points.add(point)
        elif bounds is not None:
            ranges.add(bounds)
        else:
            log.debug("Dropping numeric expression token %r", piece)
    return NumericExpression(frozenset(points), frozenset(ranges))


def expression_leaves(expression: NumericExpression, field_name: str, negate: bool = False) -> List[PredicateNode]:
    leaves: List[PredicateNode] = []
    points = sorted(expression.points)
    if len(points) == 1:
        operator = ComparisonOperator.NOT_EQUAL if negate else ComparisonOperator.EQUAL
        leaves.append(Comparison(field_name, operator, points[0]))
    elif points:
        operator = ComparisonOperator.NOT_IN_SET if negate else ComparisonOperator.IN_SET
        leaves.append(Comparison(field_name, operator, points))
    for low, high in sorted(expression.ranges):
        leaves.append(Between(field_name, low, high, negate=negate))
    return leaves


def build_numeric_predicate(text: Optional[str], field_name: str, negate: bool = False) -> Conjunction:
    """Compile ``text`` into an OR of inclusions, or with ``negate`` an AND of exclusions.

    The result is empty (a no-op) when nothing in ``text`` parsed.
    """
    expression = parse_numeric_expression(text)
    if expression.is_empty() and (text or "").strip():
        log.warning("Numeric filter %r for field %r has no usable tokens", text, field_name)
    operator = LogicalOperator.AND if negate else LogicalOperator.OR
    return Conjunction(operator, tuple(expression_leaves(expression, field_name, negate)))


__all__ = [
    "NumericExpression",
    "parse_numeric_expression",
    "expression_leaves",
    "build_numeric_predicate",
]
