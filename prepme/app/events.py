from __future__ import annotations

"""Tiny pub/sub event bus for session milestones."""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SESSION_STARTED = "session_started"
QUESTION_ADVANCED = "question_advanced"
SESSION_FINISHED = "session_finished"
SESSION_CANCELLED = "session_cancelled"
RESULT_SAVED = "result_saved"
RESULT_SAVE_FAILED = "result_save_failed"
TICK = "tick"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception:
                # one bad subscriber must not stop the session
                logger.exception("Event handler for %r failed", event)
