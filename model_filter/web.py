"""Flask-side helpers: read filters out of request parameters and describe the
operator select control for a field.

Parameters follow the bracket convention produced by the select helper::

    ?filters[id]=3&filters[id_compar]=not_eq&filters[tag][]=a&filters[tag][]=b

A JSON body or plain dict may instead carry ``{"filters": {...}}``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from flask import has_request_context, request

from .config import DEFAULT_SETTINGS, COMPARISON_OPERATORS, PLACEMENT, FilterConfig
from .operators import DEFAULT_COMPARISON_SYMBOLS, ComparisonOperator

log = logging.getLogger(__name__)

_BRACKET_KEY = re.compile(r"^(?P<placement>[^\[\]]+)\[(?P<field>[^\[\]]+)\](?P<many>\[\])?$")


def _getlist(params: Any, key: str) -> List[Any]:
    getlist = getattr(params, "getlist", None)
    if callable(getlist):
        return list(getlist(key))
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def extract_filters(
    params: Optional[Mapping[str, Any]] = None,
    placement: Optional[str] = None,
    config: Optional[FilterConfig] = None,
) -> Dict[str, Any]:
    """Pull the filter mapping for ``placement`` out of request-style parameters.

    ``params`` defaults to ``request.args`` of the active Flask request.
    ``placement`` defaults to the config's placement, then the process default.
    """
    if params is None:
        if not has_request_context():
            return {}
        params = request.args
    if placement is None:
        placement = config.placement if config is not None else DEFAULT_SETTINGS[PLACEMENT]

    filters: Dict[str, Any] = {}
    nested = params.get(placement)
    if isinstance(nested, Mapping):
        filters.update(nested)

    for key in params.keys():
        m = _BRACKET_KEY.match(str(key))
        if not m or m.group("placement") != placement:
            continue
        field_name = m.group("field")
        values = _getlist(params, key)
        if m.group("many"):
            filters[field_name] = values
        else:
            filters[field_name] = values[-1] if values else None
    return filters


@dataclass
class ComparisonSelect:
    """Everything a template needs to render an operator ``<select>``."""

    name: str
    options: List[Tuple[str, str]] = field(default_factory=list)
    selected: Optional[str] = None


def _option_pairs(option_tags: Any, config: FilterConfig) -> List[Tuple[str, str]]:
    if isinstance(option_tags, Mapping):
        pairs = []
        for label, token in option_tags.items():
            operator = ComparisonOperator.coerce(token)
            pairs.append((str(label), operator.value if operator is not None else str(token)))
        return pairs

    configured = config.comparison_symbols()
    if option_tags is None:
        return configured

    wanted = set()
    for token in option_tags:
        operator = ComparisonOperator.coerce(token)
        if operator is None:
            log.warning("Ignoring unknown operator %r in select options", token)
            continue
        wanted.add(operator.value)

    # entity labels first, then process defaults, one entry per operator
    defaults = [(label, op.value) for label, op in DEFAULT_SETTINGS[COMPARISON_OPERATORS].items()]
    builtin = [(label, op.value) for label, op in DEFAULT_COMPARISON_SYMBOLS.items()]
    seen = set()
    pairs: List[Tuple[str, str]] = []
    for label, token in configured + defaults + builtin:
        if token in seen or token not in wanted:
            continue
        seen.add(token)
        pairs.append((label, token))
    return pairs


def comparison_select_for(
    field_name: str,
    config: FilterConfig,
    option_tags: Any = None,
    params: Optional[Mapping[str, Any]] = None,
) -> ComparisonSelect:
    """Describe the operator select for ``field_name``.

    ``option_tags`` may be None (entity vocabulary), a mapping of
    label -> operator, or a list of operator tokens to pick from the entity
    and default vocabularies.
    """
    operator_key = config.operator_key(field_name)
    filters = extract_filters(params, config.placement, config)
    selected = filters.get(operator_key)
    if selected is not None:
        operator = ComparisonOperator.coerce(selected)
        selected = operator.value if operator is not None else str(selected)
    return ComparisonSelect(
        name=f"{config.placement}[{operator_key}]",
        options=_option_pairs(option_tags, config),
        selected=selected,
    )


def register_template_helpers(app):
    """Expose ``comparison_select_for(entity, field, option_tags=None)`` to Jinja templates."""
    from .filterable import config_for

    def _helper(entity, field_name, option_tags=None):
        return comparison_select_for(field_name, config_for(entity), option_tags)

    app.jinja_env.globals["comparison_select_for"] = _helper
    return app


__all__ = [
    "ComparisonSelect",
    "extract_filters",
    "comparison_select_for",
    "register_template_helpers",
]
