# model_filter/config_loader.py
from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from . import config as _config
from .errors import InvalidConfiguration

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MODEL_FILTER_CONFIG"
DEFAULT_CONFIG_PATH = Path("config") / "model_filter.json"

# keys a deployment may override process-wide; the rest are per entity only
_OVERRIDABLE = (
    _config.PLACEMENT,
    _config.COMPARISON_SUFFIX,
    _config.IGNORE_BLANK_BY_DEFAULT,
    _config.COMPARISON_OPERATORS,
)


def _read_json_file(path: Path) -> dict:
    """Read JSON from disk, returning an empty mapping on failure."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        log.warning("Could not read %s; falling back to defaults", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        log.warning("%s does not contain a JSON object; ignoring it", path)
        return {}
    return data


def resolve_config_path(path: Optional[str | os.PathLike[str]] = None) -> Path:
    """Explicit path, else ``MODEL_FILTER_CONFIG`` (after loading ``.env``), else ``config/model_filter.json``."""
    if path is not None:
        return Path(path).expanduser()
    load_dotenv(override=False)
    env_value = os.getenv(CONFIG_ENV_VAR)
    if env_value and env_value.strip():
        return Path(env_value.strip()).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_PATH


def load_filter_config(path: Optional[str | os.PathLike[str]] = None) -> dict:
    """Return the raw JSON settings, or ``{}`` when the file is missing or unreadable."""
    config_path = resolve_config_path(path)
    if not config_path.exists():
        log.debug("No model_filter config at %s", config_path)
        return {}
    return _read_json_file(config_path)


def _validated(key: str, raw: Any) -> Any:
    if key == _config.IGNORE_BLANK_BY_DEFAULT:
        return _config.validate_flag(raw, key)
    if key == _config.COMPARISON_OPERATORS:
        return _config.validate_operators(raw)
    return _config.validate_token(raw, key)


def apply_default_overrides(cfg: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Merge valid settings from ``cfg`` (or the config file) into the process-wide defaults.

    Configs that already read a key keep the value they pinned. Returns the
    settings that were applied.
    """
    if cfg is None:
        cfg = load_filter_config()
    if not isinstance(cfg, Mapping):
        log.warning("model_filter configuration is not a mapping; ignoring it")
        return {}
    applied: Dict[str, Any] = {}
    for key in _OVERRIDABLE:
        if key not in cfg:
            continue
        try:
            applied[key] = _validated(key, cfg[key])
        except InvalidConfiguration:
            log.warning("Ignoring invalid model_filter setting %s=%r", key, cfg[key], exc_info=True)
    unknown = sorted(set(cfg) - set(_OVERRIDABLE))
    if unknown:
        log.warning("Ignoring unsupported model_filter settings: %s", ", ".join(unknown))
    _config.DEFAULT_SETTINGS.update(applied)
    if applied:
        log.info("model_filter defaults overridden: %s", ", ".join(sorted(applied)))
    return applied


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "resolve_config_path",
    "load_filter_config",
    "apply_default_overrides",
]
