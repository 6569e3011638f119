from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Every trace goes to the debug log; with Explain Mode enabled (``--explain``)
the same terse line is also printed so session milestones are visible.
"""

import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

_ENABLED = False


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def enabled() -> bool:
    return _ENABLED


def _line(event: str, payload: Dict[str, Any] | None) -> str:
    try:
        return f"{event} :: {json.dumps(payload or {}, separators=(',', ':'), default=str)}"
    except (TypeError, ValueError):
        return event


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    line = _line(event, payload)
    logger.debug(line)
    if _ENABLED:
        print(f"[EXPLAIN] {line}")
