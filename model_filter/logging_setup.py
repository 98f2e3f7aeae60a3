# model_filter/logging_setup.py
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(process)d] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def coerce_level(level: Optional[str | int]) -> int:
    """``level`` as a logging constant; ``None`` reads ``LOG_LEVEL``. Unknown names mean INFO."""
    if isinstance(level, int):
        return level
    name = level if level is not None else os.getenv("LOG_LEVEL", "INFO")
    value = logging.getLevelName(str(name).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def start_log(
    *,
    app_name: str = "model_filter",
    log_dir: Optional[str | Path] = None,
    level: Optional[str | int] = None,
    to_console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the root logger for a process that uses model_filter.

    - ``log_dir`` (or ``LOG_DIR``) adds ``<app_name>.log`` there, rotated at
      ``max_bytes``. Without either only the console handler is installed.
    - Level comes from ``level`` or ``LOG_LEVEL`` (default INFO).
    - Existing root handlers are replaced, so calling it twice is harmless.
    """
    if log_dir is None:
        log_dir = os.getenv("LOG_DIR") or None

    root = logging.getLogger()
    root.setLevel(coerce_level(level))
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / f"{app_name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if to_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    root.debug("Logging started app=%s dir=%s level=%s", app_name, log_dir, logging.getLevelName(root.level))
    return root


__all__ = ["start_log", "coerce_level"]
