# model_filter/config.py
from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from .errors import ConfigurationSealed, InvalidConfiguration
from .helpers import normalize_key
from .operators import DEFAULT_COMPARISON_SYMBOLS, ComparisonOperator

log = logging.getLogger(__name__)

ALL_FIELDS = "all"
DEFAULT_OPERATORS = "default"

PLACEMENT = "placement"
COMPARISON_SUFFIX = "comparison_suffix"
COMPARISON_OPERATORS = "comparison_operators"
IGNORE_BLANK_BY_DEFAULT = "ignore_blank_by_default"
ELIGIBLE_FIELDS = "eligible_fields"
ADVANCED_FIELDS = "advanced_fields"
FIELD_MAPPINGS = "field_mappings"

# Process-wide fallback table. config_loader.apply_default_overrides() may
# replace the scalar entries once at start-up.
DEFAULT_SETTINGS: Dict[str, Any] = {
    PLACEMENT: "filters",
    COMPARISON_SUFFIX: "compar",
    COMPARISON_OPERATORS: dict(DEFAULT_COMPARISON_SYMBOLS),
    IGNORE_BLANK_BY_DEFAULT: True,
    ELIGIBLE_FIELDS: ALL_FIELDS,
    ADVANCED_FIELDS: (),
    FIELD_MAPPINGS: {},
}

FieldResolver = Callable[[Any, ComparisonOperator], Any]
KnownFieldsProvider = Callable[[], Iterable[str]]


def get_setting(key: str, config: Optional["FilterConfig"] = None) -> Any:
    """Entity override when ``config`` has one, else the process-wide default."""
    if key not in DEFAULT_SETTINGS:
        raise KeyError(f"Unknown filter setting {key!r}")
    if config is not None:
        return config.get(key)
    return DEFAULT_SETTINGS[key]


def _field_list(fields: Iterable[Any], setting: str) -> List[str]:
    result: List[str] = []
    for f in fields:
        if not isinstance(f, str) and not hasattr(f, "value"):
            raise InvalidConfiguration(f"{setting} entries must be field names, got {f!r}")
        token = normalize_key(f)
        if not token:
            raise InvalidConfiguration(f"{setting} entries cannot be empty")
        if token not in result:
            result.append(token)
    return result


def validate_operators(symbols: Any) -> Dict[str, ComparisonOperator]:
    if isinstance(symbols, str) and symbols == DEFAULT_OPERATORS:
        return dict(DEFAULT_COMPARISON_SYMBOLS)
    if not isinstance(symbols, Mapping):
        raise InvalidConfiguration("comparison operators must be 'default' or a mapping of label -> operator")
    table: Dict[str, ComparisonOperator] = {}
    for label, token in symbols.items():
        operator = ComparisonOperator.coerce(token)
        if operator is None:
            raise InvalidConfiguration(f"Unknown comparison operator {token!r} for label {label!r}")
        table[str(label)] = operator
    return table


def validate_flag(value: Any, setting: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidConfiguration(f"{setting} must be True or False, got {value!r}")
    return value


def validate_token(value: Any, setting: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidConfiguration(f"{setting} must be a non-empty string, got {value!r}")
    return value.strip()


class FilterConfig:
    """Filter settings for one entity type.

    Setters are for setup time only. Reading a setting pins it, and once a key
    is pinned (or the whole config is sealed) writing it raises
    ``ConfigurationSealed``. After setup the object is read-only, so request
    threads can share it without locking.
    """

    def __init__(self, known_fields: Optional[KnownFieldsProvider] = None, *, owner: Any = None):
        self.owner = owner
        self._known_fields = known_fields
        self._values: Dict[str, Any] = {}
        self._pinned: Set[str] = set()
        self._sealed = False
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        owner = getattr(self.owner, "__name__", None) or self.owner
        return f"FilterConfig(owner={owner!r}, sealed={self._sealed}, values={self._values!r})"

    # ---------- reading ----------
    def get(self, key: str) -> Any:
        if key not in DEFAULT_SETTINGS:
            raise KeyError(f"Unknown filter setting {key!r}")
        if key in self._pinned:
            return self._values[key]
        with self._lock:
            if key not in self._pinned:
                self._values[key] = self._materialize(key)
                self._pinned.add(key)
        return self._values[key]

    def _materialize(self, key: str) -> Any:
        if key == ELIGIBLE_FIELDS:
            return self._materialize_eligible()
        if key in self._values:
            return self._values[key]
        default = DEFAULT_SETTINGS[key]
        if isinstance(default, dict):
            return dict(default)
        return default

    def _materialize_eligible(self) -> Tuple[str, ...]:
        chosen = self._values.get(ELIGIBLE_FIELDS, DEFAULT_SETTINGS[ELIGIBLE_FIELDS])
        if chosen != ALL_FIELDS:
            return tuple(chosen)
        fields: List[str] = []
        if self._known_fields is not None:
            fields.extend(normalize_key(f) for f in self._known_fields())
        # FIELD_MAPPINGS is pinned here as well, as eligibility depends on it
        for mapped in self.get(FIELD_MAPPINGS):
            if mapped not in fields:
                fields.append(mapped)
        log.debug("Eligible filter fields for %r: %s", self.owner, fields)
        return tuple(fields)

    @property
    def placement(self) -> str:
        return self.get(PLACEMENT)

    @property
    def comparison_suffix(self) -> str:
        return self.get(COMPARISON_SUFFIX)

    @property
    def comparison_operators(self) -> Dict[str, ComparisonOperator]:
        return self.get(COMPARISON_OPERATORS)

    def comparison_symbols(self) -> List[Tuple[str, str]]:
        """``(label, operator token)`` pairs in display order, for select controls."""
        return [(label, op.value) for label, op in self.comparison_operators.items()]

    @property
    def ignore_blank_by_default(self) -> bool:
        return self.get(IGNORE_BLANK_BY_DEFAULT)

    @property
    def eligible_fields(self) -> Tuple[str, ...]:
        return self.get(ELIGIBLE_FIELDS)

    @property
    def advanced_fields(self) -> Tuple[str, ...]:
        return self.get(ADVANCED_FIELDS)

    @property
    def field_mappings(self) -> Dict[str, Union[str, FieldResolver]]:
        return self.get(FIELD_MAPPINGS)

    def operator_key(self, field_name: str) -> str:
        return f"{field_name}_{self.comparison_suffix}"

    # ---------- writing (setup only) ----------
    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> "FilterConfig":
        self._sealed = True
        return self

    def _set(self, key: str, value: Any) -> None:
        with self._lock:
            if self._sealed:
                raise ConfigurationSealed(f"Filter configuration for {self.owner!r} is sealed; cannot set {key}")
            if key in self._pinned:
                raise ConfigurationSealed(f"{key} was already read for {self.owner!r}; set it before first use")
            self._values[key] = value

    def set_placement(self, placement: Any) -> None:
        self._set(PLACEMENT, validate_token(placement, PLACEMENT))

    def set_comparison_suffix(self, suffix: Any) -> None:
        self._set(COMPARISON_SUFFIX, validate_token(suffix, COMPARISON_SUFFIX))

    def set_comparison_operators(self, symbols: Any) -> None:
        self._set(COMPARISON_OPERATORS, validate_operators(symbols))

    def set_ignore_blank_by_default(self, flag: Any) -> None:
        self._set(IGNORE_BLANK_BY_DEFAULT, validate_flag(flag, IGNORE_BLANK_BY_DEFAULT))

    def set_eligible_fields(self, fields: Any) -> None:
        if isinstance(fields, str):
            if fields != ALL_FIELDS:
                raise InvalidConfiguration("eligible fields must be 'all' or a list of field names")
            self._set(ELIGIBLE_FIELDS, ALL_FIELDS)
            return
        if not isinstance(fields, (list, tuple)):
            raise InvalidConfiguration("eligible fields must be 'all' or a list of field names")
        self._set(ELIGIBLE_FIELDS, tuple(_field_list(fields, ELIGIBLE_FIELDS)))

    def set_advanced_fields(self, fields: Any) -> None:
        if isinstance(fields, str) or not isinstance(fields, (list, tuple, set, frozenset)):
            raise InvalidConfiguration("advanced fields must be a list of field names")
        self._set(ADVANCED_FIELDS, tuple(_field_list(fields, ADVANCED_FIELDS)))

    def set_field_mappings(self, mappings: Any) -> None:
        if not isinstance(mappings, Mapping):
            raise InvalidConfiguration("field mappings must be a mapping of field -> resolver")
        table: Dict[str, Union[str, FieldResolver]] = {}
        for raw_field, resolver in mappings.items():
            field_name = normalize_key(raw_field)
            if not field_name:
                raise InvalidConfiguration("field mapping keys cannot be empty")
            if isinstance(resolver, str):
                if not resolver.strip():
                    raise InvalidConfiguration(f"field mapping for {field_name!r} names no resolver")
                table[field_name] = resolver.strip()
            elif callable(resolver):
                table[field_name] = resolver
            else:
                raise InvalidConfiguration(
                    f"field mapping for {field_name!r} must be a callable or attribute name, got {resolver!r}"
                )
        self._set(FIELD_MAPPINGS, table)

    def configure(self, **settings: Any) -> "FilterConfig":
        """Apply several settings by name, e.g. ``configure(advanced_fields=["price"])``."""
        for key, value in settings.items():
            setter = getattr(self, f"set_{key}", None)
            if key not in DEFAULT_SETTINGS or setter is None:
                raise InvalidConfiguration(f"Unknown filter setting {key!r}")
            setter(value)
        return self


__all__ = [
    "ALL_FIELDS",
    "DEFAULT_OPERATORS",
    "DEFAULT_SETTINGS",
    "FilterConfig",
    "get_setting",
    "validate_operators",
    "validate_flag",
    "validate_token",
]
