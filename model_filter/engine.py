# model_filter/engine.py

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, List, Optional

import logging

from sqlalchemy import select

from .config import FilterConfig
from .errors import UnknownMapping
from .filterable import config_for
from .helpers import is_blank, normalize_key, to_bool, value_to_expression_text
from .numeric_expression import build_numeric_predicate
from .operators import EXPRESSION_OPERATORS, ComparisonOperator, effective_operator
from .predicates import Comparison, PredicateNode, apply_predicates, as_predicate

log = logging.getLogger(__name__)

# Per-call override of the blank-value policy.
IGNORE_BLANK_VALUES_KEY = "ignore_blank_values"


def normalize_filters(raw_filters: Optional[Mapping[Any, Any]]) -> dict:
    """Copy ``raw_filters`` with canonical keys; later duplicates win."""
    if raw_filters is None:
        return {}
    if not isinstance(raw_filters, Mapping):
        raise TypeError("filters must be a mapping of field -> value")
    return {normalize_key(k): v for k, v in raw_filters.items()}


def _ignore_blank(filters: Mapping[str, Any], config: FilterConfig) -> bool:
    if IGNORE_BLANK_VALUES_KEY not in filters:
        return config.ignore_blank_by_default
    override = to_bool(filters[IGNORE_BLANK_VALUES_KEY])
    if override is None:
        log.warning(
            "Could not read %s=%r; using default %s",
            IGNORE_BLANK_VALUES_KEY,
            filters[IGNORE_BLANK_VALUES_KEY],
            config.ignore_blank_by_default,
        )
        return config.ignore_blank_by_default
    return override


def suitable_fields(filters: Mapping[str, Any], config: FilterConfig) -> List[str]:
    """Eligible fields present in ``filters``, in eligible order, minus blanks when ignored."""
    no_blanks = _ignore_blank(filters, config)
    return [
        f
        for f in config.eligible_fields
        if f in filters and not (no_blanks and is_blank(filters[f]))
    ]


def _custom_resolver(entity: Any, field_name: str, mapping: Any) -> Callable[[Any, ComparisonOperator], Any]:
    if callable(mapping):
        return mapping
    resolver = getattr(entity, mapping, None) if entity is not None else None
    if resolver is None or not callable(resolver):
        raise UnknownMapping(field_name, mapping, entity)
    return resolver


def resolve_field(
    field_name: str,
    value: Any,
    requested_operator: Any,
    config: FilterConfig,
    entity: Any = None,
) -> Optional[PredicateNode]:
    """Route one field to its custom resolver, the numeric-expression path or a plain comparison."""
    operator = effective_operator(requested_operator, value, field=field_name)

    mapping = config.field_mappings.get(field_name)
    if mapping is not None:
        resolver = _custom_resolver(entity, field_name, mapping)
        log.debug("Field %r -> custom resolver %r (%s)", field_name, mapping, operator.value)
        return as_predicate(resolver(value, operator))

    if field_name in config.advanced_fields and operator in EXPRESSION_OPERATORS:
        log.debug("Field %r -> numeric expression (%s)", field_name, operator.value)
        return build_numeric_predicate(value_to_expression_text(value), field_name, negate=operator.negated)

    return Comparison(field_name, operator, value)


def resolve(
    raw_filters: Optional[Mapping[Any, Any]],
    config: FilterConfig,
    entity: Any = None,
) -> List[PredicateNode]:
    """Turn a raw filter request into predicate nodes, one per applied field.

    An empty list means the base query should pass through untouched.
    """
    filters = normalize_filters(raw_filters)
    nodes: List[PredicateNode] = []
    for field_name in suitable_fields(filters, config):
        node = resolve_field(
            field_name,
            filters[field_name],
            filters.get(config.operator_key(field_name)),
            config,
            entity,
        )
        if node is not None:
            nodes.append(node)
    return nodes


def filtered(entity: Any, filters: Optional[Mapping[Any, Any]] = None, *, base: Any = None) -> Any:
    """Return ``base`` (default ``select(entity)``) narrowed by ``filters``.

    Example::

        filtered(Item, {"id": 3, "name": "", "price": [1, 2], "price_compar": "not_in"})
    """
    query = select(entity) if base is None else base
    nodes = resolve(filters, config_for(entity), entity)
    if not nodes:
        return query
    return apply_predicates(query, entity, nodes)


def with_value_of(
    entity: Any,
    field_name: str,
    value: Any,
    operator: Any = None,
    *,
    base: Any = None,
) -> Any:
    """Apply a single field constraint, e.g. ``with_value_of(Item, "id", (3, 5))``."""
    query = select(entity) if base is None else base
    node = resolve_field(normalize_key(field_name), value, operator, config_for(entity), entity)
    if node is None:
        return query
    return apply_predicates(query, entity, [node])


__all__ = [
    "IGNORE_BLANK_VALUES_KEY",
    "normalize_filters",
    "suitable_fields",
    "resolve_field",
    "resolve",
    "filtered",
    "with_value_of",
]
