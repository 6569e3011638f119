from __future__ import annotations

"""Cancelable once-per-second ticker.

The session engine only needs "call tick() roughly every second, and stop
deterministically". Tests drive ticks by hand instead of using this class.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Ticker:
    def __init__(self, callback: Callable[[], None], interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._callback = callback
        self._interval = float(interval)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        # held while a callback runs so stop() can wait it out
        self._fire_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self) -> None:
        if self.running:
            return
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop,), name="prepme-ticker", daemon=True)
        self._thread.start()

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self._interval):
            with self._fire_lock:
                if stop.is_set():
                    return
                try:
                    self._callback()
                except Exception:
                    logger.exception("Ticker callback failed")

    def stop(self) -> None:
        """Stop ticking. Idempotent; no callback fires after this returns.

        Safe to call from inside the callback itself.
        """
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is None or thread is threading.current_thread():
            return
        # wait for an in-flight callback, if any
        with self._fire_lock:
            pass
