from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Iterable, Optional


def normalize_key(key: Any) -> str:
    """Canonical token form for a filter key (``"id "`` and ``"id"`` are the same field)."""
    if isinstance(key, str):
        return key.strip()
    # Enum members and other key types collapse to their text form.
    value = getattr(key, "value", key)
    return str(value).strip()


def is_iterable_but_not_str(x: Any) -> bool:
    return isinstance(x, Iterable) and not isinstance(x, (str, bytes, bytearray, Mapping))


def is_bounds(value: Any) -> bool:
    """True for an inclusive ``(low, high)`` pair or a step-1 ``range``."""
    if isinstance(value, range):
        return value.step == 1 and len(value) > 0
    return isinstance(value, tuple) and len(value) == 2


def bounds_of(value: Any) -> tuple[Any, Any]:
    if isinstance(value, range):
        # range stop is exclusive; filters use inclusive bounds
        return value.start, value.stop - 1
    low, high = value
    return low, high


def is_blank(value: Any) -> bool:
    """Blank means absent, an empty/whitespace string or an empty collection.

    ``False`` and ``0`` are real filter values and are not blank.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (bytes, bytearray)):
        return not bytes(value).strip()
    if isinstance(value, (Mapping, list, tuple, set, frozenset, range)):
        return len(value) == 0
    return False


def to_bool(value: Any, default: Optional[bool] = None) -> Optional[bool]:
    """Coerce request-style flags (``"false"``, ``"1"``, ``True``) into a bool.

    Returns ``default`` when the value cannot be interpreted.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(value)
        return default
    if isinstance(value, str):
        low = value.strip().lower()
        if low in {"true", "1", "yes", "on", "t", "y"}:
            return True
        if low in {"false", "0", "no", "off", "f", "n"}:
            return False
    return default


def _number_text(value: Any) -> str:
    # positional notation; the expression grammar has no exponent
    return format(Decimal(str(value)), "f")


def value_to_expression_text(value: Any) -> str:
    """Render a filter value as numeric-expression text.

    Lists become comma separated tokens and bounds become ``low-high``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if is_bounds(value):
        low, high = bounds_of(value)
        return f"{value_to_expression_text(low)}-{value_to_expression_text(high)}"
    if is_iterable_but_not_str(value):
        return ",".join(value_to_expression_text(v) for v in value)
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return _number_text(value)
    return str(value)
