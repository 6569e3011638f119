from __future__ import annotations

"""Configuration loading and validation for PrepMe.

This module loads YAML configuration, applies defaults, and validates
that enumerations and ranges are sane for the CLI and the engines.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..app.session_manager import MAX_MINUTES, MIN_MINUTES

logger = logging.getLogger(__name__)

ALLOWED_FILTERS = {"all", "due", "reviewed", "mastered"}
ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DATA_DIR_ENV = "PREPME_DATA_DIR"


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        cfg = _load_yaml(Path(__file__).with_name("defaults.yml"))
    return cfg


def _int_in_range(section: Dict[str, Any], key: str, default: int, lo: int, hi: Optional[int] = None) -> None:
    try:
        value = int(section.get(key, default))
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r, using %s.", key, section.get(key), default)
        section[key] = default
        return
    if value < lo or (hi is not None and value > hi):
        logger.warning("%s=%s out of range, using %s.", key, value, default)
        value = default
    section[key] = value


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    # Shallow defaults for missing sections
    for section in ("storage", "test", "revision", "analytics", "logging"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    storage = cfg["storage"]
    test = cfg["test"]
    revision = cfg["revision"]
    analytics = cfg["analytics"]
    log_cfg = cfg["logging"]

    storage.setdefault("data_dir", "~/PrepMe")
    storage.setdefault("history_file", "test_history.json")
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        storage["data_dir"] = env_dir
    storage["data_dir"] = str(Path(str(storage["data_dir"])).expanduser())

    _int_in_range(test, "count", 5, 1)
    _int_in_range(test, "duration_minutes", 30, MIN_MINUTES, MAX_MINUTES)

    _int_in_range(revision, "mastered_box", 3, 0, 5)
    revision.setdefault("default_filter", "due")
    if revision["default_filter"] not in ALLOWED_FILTERS:
        logger.warning("Unsupported default_filter '%s', using 'due'.", revision["default_filter"])
        revision["default_filter"] = "due"

    _int_in_range(analytics, "chart_window", 10, 1)
    _int_in_range(analytics, "smoothing_span", 5, 2)
    analytics.setdefault("reports_dir", "./reports")

    level = str(log_cfg.get("level", "INFO")).upper()
    if level not in ALLOWED_LOG_LEVELS:
        logger.warning("Unsupported logging level '%s', using 'INFO'.", level)
        level = "INFO"
    log_cfg["level"] = level

    return cfg
