"""Tests for FilterConfig defaults, validation and sealing."""

from __future__ import annotations

import pytest

from model_filter.config import ALL_FIELDS, DEFAULT_SETTINGS, FilterConfig, get_setting
from model_filter.errors import ConfigurationSealed, InvalidConfiguration
from model_filter.operators import DEFAULT_COMPARISON_SYMBOLS, ComparisonOperator


def _config(fields=("id", "name", "price")) -> FilterConfig:
    return FilterConfig(lambda: list(fields), owner="parts")


# =============================================================================
# Defaults and fallback
# =============================================================================


def test_defaults() -> None:
    config = _config()
    assert config.placement == "filters"
    assert config.comparison_suffix == "compar"
    assert config.ignore_blank_by_default is True
    assert config.advanced_fields == ()
    assert config.field_mappings == {}
    assert config.comparison_operators == DEFAULT_COMPARISON_SYMBOLS


def test_default_operator_order_for_rendering() -> None:
    assert _config().comparison_symbols() == [
        ("=", "eq"),
        ("<", "lt"),
        (">", "gt"),
        ("<=", "lteq"),
        (">=", "gteq"),
        ("!=", "not_eq"),
    ]


def test_get_setting_falls_back_to_process_default() -> None:
    assert get_setting("placement") == "filters"
    config = _config()
    config.set_placement("q")
    assert get_setting("placement", config) == "q"


def test_get_setting_rejects_unknown_key() -> None:
    with pytest.raises(KeyError):
        get_setting("colour")


def test_all_fields_is_schema_plus_mappings() -> None:
    """Known columns come first, mapped virtual fields follow."""
    config = _config()
    config.set_field_mappings({"tag": lambda value, op: None, "name": "by_name"})
    assert config.eligible_fields == ("id", "name", "price", "tag")


def test_explicit_allow_list_keeps_order() -> None:
    config = _config()
    config.set_eligible_fields(["price", "id", "price"])
    assert config.eligible_fields == ("price", "id")


def test_all_sentinel_accepted() -> None:
    config = _config()
    config.set_eligible_fields(ALL_FIELDS)
    assert config.eligible_fields == ("id", "name", "price")


def test_process_default_change_affects_unread_configs_only() -> None:
    read = _config()
    assert read.placement == "filters"
    unread = _config()
    DEFAULT_SETTINGS["placement"] = "search"
    assert read.placement == "filters"
    assert unread.placement == "search"


def test_operator_table_accepts_symbols_and_tokens() -> None:
    config = _config()
    config.set_comparison_operators({"is": "eq", "below": "<", "among": ComparisonOperator.IN_SET})
    assert config.comparison_symbols() == [("is", "eq"), ("below", "lt"), ("among", "in")]


def test_operator_key_uses_suffix() -> None:
    config = _config()
    config.set_comparison_suffix("op")
    assert config.operator_key("price") == "price_op"


def test_configure_by_name() -> None:
    config = _config().configure(advanced_fields=["price"], ignore_blank_by_default=False)
    assert config.advanced_fields == ("price",)
    assert config.ignore_blank_by_default is False


# =============================================================================
# Validation
# =============================================================================


@pytest.mark.parametrize(
    "setter, value",
    [
        ("set_comparison_operators", ["=", "<"]),
        ("set_comparison_operators", {"approx": "like"}),
        ("set_eligible_fields", "some"),
        ("set_eligible_fields", {"id"}),
        ("set_eligible_fields", [1, 2]),
        ("set_eligible_fields", ["id", " "]),
        ("set_advanced_fields", "price"),
        ("set_field_mappings", [("tag", "by_tag")]),
        ("set_field_mappings", {"tag": 42}),
        ("set_field_mappings", {"tag": ""}),
        ("set_ignore_blank_by_default", "false"),
        ("set_ignore_blank_by_default", 0),
        ("set_placement", ""),
        ("set_comparison_suffix", None),
    ],
)
def test_setters_reject_wrong_shapes(setter: str, value) -> None:
    with pytest.raises(InvalidConfiguration):
        getattr(_config(), setter)(value)


def test_configure_rejects_unknown_setting() -> None:
    with pytest.raises(InvalidConfiguration):
        _config().configure(colour="red")


# =============================================================================
# Write-once behaviour
# =============================================================================


def test_write_after_read_is_rejected() -> None:
    config = _config()
    assert config.ignore_blank_by_default is True
    with pytest.raises(ConfigurationSealed):
        config.set_ignore_blank_by_default(False)


def test_reading_eligible_fields_pins_mappings() -> None:
    config = _config()
    config.eligible_fields
    with pytest.raises(ConfigurationSealed):
        config.set_field_mappings({"tag": "by_tag"})


def test_unread_keys_stay_writable() -> None:
    config = _config()
    config.placement
    config.set_advanced_fields(["price"])
    assert config.advanced_fields == ("price",)


def test_sealed_config_rejects_every_write() -> None:
    config = _config().seal()
    assert config.sealed
    with pytest.raises(ConfigurationSealed):
        config.set_placement("other")
    # sealing is not an error for reads
    assert config.placement == "filters"


def test_sealed_is_an_invalid_configuration() -> None:
    assert issubclass(ConfigurationSealed, InvalidConfiguration)
