"""
Predicate nodes and their emission to SQLAlchemy.

A resolved filter is a small tree: ``Comparison`` leaves joined by
``Conjunction`` nodes, plus ``ClausePredicate`` for clauses produced by custom
field resolvers. Nothing here executes a statement; ``apply_predicates`` only
returns a new ``Select`` with extra ``WHERE`` criteria.

Example:
    nodes = [Comparison("id", ComparisonOperator.IN_SET, [3, 5, 12])]
    stmt = apply_predicates(select(Item), Item, nodes)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from sqlalchemy import and_, not_, or_
from sqlalchemy.orm.attributes import QueryableAttribute
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.expression import FromClause

from .errors import UnknownField
from .helpers import bounds_of, is_bounds, is_iterable_but_not_str
from .operators import ComparisonOperator, LogicalOperator


def column_for(entity: Any, field_name: str) -> Any:
    """Return the column expression for ``field_name`` on a table or mapped class."""
    if isinstance(entity, FromClause):
        columns = entity.c
        if field_name in columns:
            return columns[field_name]
        raise UnknownField(field_name, entity)
    attr = getattr(entity, field_name, None)
    if isinstance(attr, (QueryableAttribute, ColumnElement)):
        return attr
    raise UnknownField(field_name, entity)


def _membership(value: Any) -> list:
    if is_iterable_but_not_str(value):
        return list(value)
    return [value]


def _emit_equal(column, value):
    if is_bounds(value) or is_iterable_but_not_str(value):
        return _emit_in(column, value)
    return column == value


def _emit_not_equal(column, value):
    if is_bounds(value) or is_iterable_but_not_str(value):
        return _emit_not_in(column, value)
    return column != value


def _emit_in(column, value):
    if is_bounds(value):
        low, high = bounds_of(value)
        return column.between(low, high)
    return column.in_(_membership(value))


def _emit_not_in(column, value):
    if is_bounds(value):
        low, high = bounds_of(value)
        return not_(column.between(low, high))
    return column.not_in(_membership(value))


# The only place that knows how an operator maps onto SQLAlchemy.
OPERATOR_EMITTERS: Dict[ComparisonOperator, Callable[[Any, Any], Any]] = {
    ComparisonOperator.EQUAL: _emit_equal,
    ComparisonOperator.NOT_EQUAL: _emit_not_equal,
    ComparisonOperator.LESS_THAN: lambda column, value: column < value,
    ComparisonOperator.GREATER_THAN: lambda column, value: column > value,
    ComparisonOperator.LESS_OR_EQUAL: lambda column, value: column <= value,
    ComparisonOperator.GREATER_OR_EQUAL: lambda column, value: column >= value,
    ComparisonOperator.IN_SET: _emit_in,
    ComparisonOperator.NOT_IN_SET: _emit_not_in,
}


class PredicateNode(ABC):
    """Base class for resolved filter predicates."""

    @abstractmethod
    def to_clause(self, entity: Any) -> Optional[ColumnElement]:
        """Compile against ``entity``; ``None`` means "no constraint"."""
        ...

    def __and__(self, other: PredicateNode) -> PredicateNode:
        return Conjunction(LogicalOperator.AND, (self, other))

    def __or__(self, other: PredicateNode) -> PredicateNode:
        return Conjunction(LogicalOperator.OR, (self, other))


@dataclass(frozen=True)
class Comparison(PredicateNode):
    """A single ``field <operator> value`` leaf."""

    field_name: str
    operator: ComparisonOperator
    value: Any

    def to_clause(self, entity: Any) -> ColumnElement:
        column = column_for(entity, self.field_name)
        return OPERATOR_EMITTERS[self.operator](column, self.value)


@dataclass(frozen=True)
class Between(PredicateNode):
    """Inclusive range test; ``negate`` turns it into ``< low OR > high``."""

    field_name: str
    low: Any
    high: Any
    negate: bool = False

    def to_clause(self, entity: Any) -> ColumnElement:
        column = column_for(entity, self.field_name)
        if self.negate:
            return or_(column < self.low, column > self.high)
        return column.between(self.low, self.high)


@dataclass(frozen=True)
class Conjunction(PredicateNode):
    """AND/OR over child nodes. With no children it is a no-op."""

    operator: LogicalOperator
    children: Tuple[PredicateNode, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def __bool__(self) -> bool:
        return bool(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def to_clause(self, entity: Any) -> Optional[ColumnElement]:
        clauses = [c for c in (child.to_clause(entity) for child in self.children) if c is not None]
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        if self.operator == LogicalOperator.AND:
            return and_(*clauses)
        return or_(*clauses)


@dataclass(frozen=True)
class ClausePredicate(PredicateNode):
    """Wraps a clause a custom field resolver built itself."""

    clause: Any

    def to_clause(self, entity: Any) -> Any:
        return self.clause


def as_predicate(result: Any) -> Optional[PredicateNode]:
    """Normalize a custom resolver's return value into a node (or None)."""
    if result is None or isinstance(result, PredicateNode):
        return result
    return ClausePredicate(result)


def apply_predicates(base: Any, entity: Any, nodes: Iterable[PredicateNode]) -> Any:
    """Return ``base`` with one ``WHERE`` criterion per non-empty node."""
    query = base
    for node in nodes:
        clause = node.to_clause(entity)
        if clause is not None:
            query = query.where(clause)
    return query


__all__ = [
    "PredicateNode",
    "Comparison",
    "Between",
    "Conjunction",
    "ClausePredicate",
    "OPERATOR_EMITTERS",
    "as_predicate",
    "apply_predicates",
    "column_for",
]
