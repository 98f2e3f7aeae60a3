"""
Declarative filtering for SQLAlchemy models.

Avoid side effects here: no logging setup and no config file reads. Call
``model_filter.config_loader.apply_default_overrides()`` and
``model_filter.logging_setup.start_log()`` from the application.
"""

from .config import ALL_FIELDS, DEFAULT_SETTINGS, FilterConfig, get_setting
from .engine import filtered, resolve, with_value_of
from .errors import (
    ConfigurationSealed,
    InvalidConfiguration,
    ModelFilterError,
    UnknownField,
    UnknownMapping,
)
from .filterable import acts_as_filterable, config_for
from .numeric_expression import NumericExpression, build_numeric_predicate, parse_numeric_expression
from .operators import ComparisonOperator, LogicalOperator
from .predicates import Between, ClausePredicate, Comparison, Conjunction, PredicateNode

__all__ = [
    "ALL_FIELDS",
    "DEFAULT_SETTINGS",
    "FilterConfig",
    "get_setting",
    "filtered",
    "resolve",
    "with_value_of",
    "ModelFilterError",
    "InvalidConfiguration",
    "ConfigurationSealed",
    "UnknownMapping",
    "UnknownField",
    "acts_as_filterable",
    "config_for",
    "NumericExpression",
    "build_numeric_predicate",
    "parse_numeric_expression",
    "ComparisonOperator",
    "LogicalOperator",
    "PredicateNode",
    "Comparison",
    "Between",
    "Conjunction",
    "ClausePredicate",
]
