"""Bind filter configuration to SQLAlchemy models and tables.

Usage::

    @acts_as_filterable(advanced_fields=["price"])
    class Item(Base):
        __tablename__ = "items"
        ...

    Item.filtered({"id": [3, 5, 12], "price": "10-20, 99"})

or, with a setup block::

    def setup(config):
        config.set_eligible_fields(["id", "name"])
        config.set_ignore_blank_by_default(False)

    acts_as_filterable(setup)(Item)

Entities that were never decorated still get a default configuration the
first time they are filtered.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.sql.expression import FromClause

from .config import FilterConfig

log = logging.getLogger(__name__)

_CONFIGS: Dict[Any, FilterConfig] = {}
_REGISTRY_LOCK = threading.Lock()


def known_fields_of(entity: Any) -> List[str]:
    """Column names of a table, or column attribute keys of a mapped class, in declared order."""
    if isinstance(entity, FromClause):
        return list(entity.c.keys())
    try:
        mapper = sa_inspect(entity)
    except NoInspectionAvailable:
        log.debug("No SQLAlchemy inspection for %r; it has no known fields", entity)
        return []
    column_attrs = getattr(mapper, "column_attrs", None)
    if column_attrs is None:
        return []
    return [attr.key for attr in column_attrs]


def config_for(entity: Any) -> FilterConfig:
    """Return the entity's FilterConfig, creating a default one on first use."""
    config = _CONFIGS.get(entity)
    if config is not None:
        return config
    with _REGISTRY_LOCK:
        config = _CONFIGS.get(entity)
        if config is None:
            config = FilterConfig(lambda: known_fields_of(entity), owner=entity)
            _CONFIGS[entity] = config
    return config


def forget_config(entity: Any) -> None:
    """Drop a registered configuration (test isolation)."""
    with _REGISTRY_LOCK:
        _CONFIGS.pop(entity, None)


def _attach_class_methods(entity: type) -> None:
    # imported here: engine imports this module
    from .engine import filtered, with_value_of

    def _filtered(cls, filters=None, base=None):
        return filtered(cls, filters, base=base)

    def _with_value_of(cls, field, value, operator=None, base=None):
        return with_value_of(cls, field, value, operator, base=base)

    def _comparison_symbols(cls):
        return config_for(cls).comparison_symbols()

    setattr(entity, "filtered", classmethod(_filtered))
    setattr(entity, "with_value_of", classmethod(_with_value_of))
    setattr(entity, "comparison_symbols", classmethod(_comparison_symbols))


def acts_as_filterable(setup: Optional[Callable[[FilterConfig], Any]] = None, **settings: Any):
    """Class (or Table) decorator that configures filtering once and seals it.

    ``settings`` are applied first (``eligible_fields=``, ``field_mappings=``,
    ``advanced_fields=``, ``comparison_operators=``, ``ignore_blank_by_default=``,
    ``placement=``, ``comparison_suffix=``), then ``setup(config)`` runs. Any
    setter raising ``InvalidConfiguration`` aborts the setup.
    """
    if isinstance(setup, type) and not settings:
        # bare @acts_as_filterable
        return acts_as_filterable()(setup)

    def decorate(entity: Any) -> Any:
        config = config_for(entity)
        config.configure(**settings)
        if setup is not None:
            setup(config)
        config.seal()
        if isinstance(entity, type):
            _attach_class_methods(entity)
        log.debug("Filtering configured for %r", getattr(entity, "__name__", entity))
        return entity

    return decorate


__all__ = [
    "acts_as_filterable",
    "config_for",
    "forget_config",
    "known_fields_of",
]
