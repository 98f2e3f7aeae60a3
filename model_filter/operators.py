from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from .helpers import is_bounds, is_iterable_but_not_str

log = logging.getLogger(__name__)


class ComparisonOperator(str, Enum):
    EQUAL = "eq"
    NOT_EQUAL = "not_eq"
    LESS_THAN = "lt"
    GREATER_THAN = "gt"
    LESS_OR_EQUAL = "lteq"
    GREATER_OR_EQUAL = "gteq"
    IN_SET = "in"
    NOT_IN_SET = "not_in"

    @property
    def negated(self) -> bool:
        return self in (ComparisonOperator.NOT_EQUAL, ComparisonOperator.NOT_IN_SET)

    @classmethod
    def coerce(cls, token: Any) -> Optional["ComparisonOperator"]:
        """Return the operator for an enum member, its value or its symbol.

        Returns None for anything unrecognised; callers decide the fallback.
        """
        if isinstance(token, cls):
            return token
        if token is None:
            return None
        text = str(getattr(token, "value", token)).strip()
        if not text:
            return None
        try:
            return cls(text.lower())
        except ValueError:
            pass
        return _SYMBOL_TO_OPERATOR.get(text)

    @classmethod
    def infer(cls, value: Any) -> "ComparisonOperator":
        """List, set and bounds values default to membership; everything else to equality."""
        if is_bounds(value) or is_iterable_but_not_str(value):
            return cls.IN_SET
        return cls.EQUAL


class LogicalOperator(str, Enum):
    AND = "and"
    OR = "or"


# Operators that the numeric-expression path accepts.
EXPRESSION_OPERATORS = frozenset(
    {
        ComparisonOperator.EQUAL,
        ComparisonOperator.NOT_EQUAL,
        ComparisonOperator.IN_SET,
        ComparisonOperator.NOT_IN_SET,
    }
)

# label -> operator, in display order
DEFAULT_COMPARISON_SYMBOLS: Dict[str, ComparisonOperator] = {
    "=": ComparisonOperator.EQUAL,
    "<": ComparisonOperator.LESS_THAN,
    ">": ComparisonOperator.GREATER_THAN,
    "<=": ComparisonOperator.LESS_OR_EQUAL,
    ">=": ComparisonOperator.GREATER_OR_EQUAL,
    "!=": ComparisonOperator.NOT_EQUAL,
}

_SYMBOL_TO_OPERATOR: Dict[str, ComparisonOperator] = dict(DEFAULT_COMPARISON_SYMBOLS)
_SYMBOL_TO_OPERATOR.update({"==": ComparisonOperator.EQUAL, "<>": ComparisonOperator.NOT_EQUAL})


def effective_operator(requested: Any, value: Any, *, field: str = "") -> ComparisonOperator:
    """Resolve the operator for one field: the requested token, else the inferred default."""
    if requested is None or (isinstance(requested, str) and not requested.strip()):
        return ComparisonOperator.infer(value)
    operator = ComparisonOperator.coerce(requested)
    if operator is None:
        fallback = ComparisonOperator.infer(value)
        log.warning(
            "Unknown comparison operator %r for field %r; using %s",
            requested,
            field,
            fallback.value,
        )
        return fallback
    return operator


__all__ = [
    "ComparisonOperator",
    "LogicalOperator",
    "EXPRESSION_OPERATORS",
    "DEFAULT_COMPARISON_SYMBOLS",
    "effective_operator",
]
