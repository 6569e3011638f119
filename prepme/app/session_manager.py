from __future__ import annotations

"""Mock-test sessions: a timed quiz over a random subset of saved problems.

The state machine is ``config -> running -> results``. Transitions are pure
functions over an immutable ``TestSession`` value, so they can be exercised
without any timer or UI. ``SessionManager`` is the stateful driver used by
front-ends: it owns the single active session, the one-second ticker and
persistence of the finished result.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field

from ..errors import InvalidTransition, NoProblemsAvailable, PersistenceUnavailable
from ..storage.schema import OUTCOMES, ProblemRecord, TestResult
from ..util.randomness import RandomSource, shuffle_take
from ..util.timeutil import as_ms
from . import events as ev
from .events import EventBus
from .explain import trace as xtrace
from .timer import Ticker

logger = logging.getLogger(__name__)

COUNT_CHOICES = (5, 10, 20)
MIN_MINUTES = 5
MAX_MINUTES = 120


class SessionState(str, Enum):
    CONFIG = "config"
    RUNNING = "running"
    RESULTS = "results"


class TestConfig(BaseModel):
    """Question count (5/10/20 or any custom positive value) and duration in minutes."""

    __test__ = False

    count: int = Field(5, ge=1)
    duration_minutes: int = Field(30, ge=MIN_MINUTES, le=MAX_MINUTES)

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60


@dataclass(frozen=True)
class TestSession:
    __test__ = False

    config: TestConfig = field(default_factory=TestConfig)
    state: SessionState = SessionState.CONFIG
    session_id: str = ""
    questions: Tuple[ProblemRecord, ...] = ()
    current_index: int = 0
    time_left: int = 0
    results: Mapping[str, str] = field(default_factory=dict)
    show_solution: bool = False
    result: Optional[TestResult] = None

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def score(self) -> int:
        return sum(1 for r in self.results.values() if r == "pass")

    @property
    def answered(self) -> int:
        return len(self.results)

    @property
    def current_question(self) -> Optional[ProblemRecord]:
        if self.state is not SessionState.RUNNING or not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def elapsed_seconds(self) -> int:
        return self.config.duration_seconds - self.time_left


def _require(session: TestSession, state: SessionState, operation: str) -> None:
    if session.state is not state:
        raise InvalidTransition(operation, session.state.value)


# --- transitions ---

def new_session(config: Optional[TestConfig] = None) -> TestSession:
    return TestSession(config=config or TestConfig())


def configure(session: TestSession, *, count: Optional[int] = None, duration_minutes: Optional[int] = None) -> TestSession:
    _require(session, SessionState.CONFIG, "configure")
    data = session.config.model_dump()
    if count is not None:
        data["count"] = count
    if duration_minutes is not None:
        data["duration_minutes"] = duration_minutes
    return replace(session, config=TestConfig(**data))


def start(session: TestSession, problems: Sequence[ProblemRecord], rng: Optional[RandomSource] = None) -> TestSession:
    """Pick ``min(count, len(problems))`` distinct problems and start the clock.

    Raises NoProblemsAvailable (and stays in ``config``) when the pool is empty.
    """
    _require(session, SessionState.CONFIG, "start")
    # one entry per id, so a question can never repeat within a session
    pool = list({p.id: p for p in problems}.values())
    if not pool:
        raise NoProblemsAvailable()
    selected = shuffle_take(pool, session.config.count, rng)
    return replace(
        session,
        state=SessionState.RUNNING,
        session_id=uuid4().hex,
        questions=tuple(selected),
        current_index=0,
        time_left=session.config.duration_seconds,
        results={},
        show_solution=False,
        result=None,
    )


def reveal_solution(session: TestSession) -> TestSession:
    _require(session, SessionState.RUNNING, "reveal the solution")
    if session.show_solution:
        return session
    return replace(session, show_solution=True)


def finalize(session: TestSession, now: Any = None) -> TestSession:
    """Score the session and attach its TestResult. Unanswered questions score nothing."""
    _require(session, SessionState.RUNNING, "finish")
    ts = as_ms(now)
    result = TestResult(
        id=str(ts),
        timestamp=ts,
        score=session.score,
        total=session.total,
        duration_seconds=max(0, session.elapsed_seconds),
    )
    return replace(session, state=SessionState.RESULTS, result=result, show_solution=False)


def record_outcome(session: TestSession, outcome: str, now: Any = None) -> TestSession:
    _require(session, SessionState.RUNNING, "record an outcome")
    if outcome not in OUTCOMES:
        raise ValueError(f"Unknown outcome: {outcome!r} (expected one of {OUTCOMES})")
    q = session.questions[session.current_index]
    results: Dict[str, str] = dict(session.results)
    results[q.id] = outcome
    session = replace(session, results=results)
    if session.current_index < session.total - 1:
        return replace(session, current_index=session.current_index + 1, show_solution=False)
    return finalize(session, now)


def tick(session: TestSession, now: Any = None) -> TestSession:
    """One second elapsed. Ticks outside ``running`` are ignored."""
    if session.state is not SessionState.RUNNING:
        return session
    left = session.time_left - 1
    if left <= 0:
        return finalize(replace(session, time_left=0), now)
    return replace(session, time_left=left)


def return_to_config(session: TestSession) -> TestSession:
    """Abandon a running session (nothing is saved) or leave the results screen."""
    return new_session(session.config)


def format_time(seconds: int) -> str:
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m}:{s:02d}"


# --- stateful driver ---

class SessionManager:
    """Owns the single active session, its ticker and result persistence."""

    def __init__(
        self,
        store: Any,
        *,
        config: Optional[TestConfig] = None,
        events: Optional[EventBus] = None,
        rng: Optional[RandomSource] = None,
        clock: Optional[Callable[[], int]] = None,
        ticker_factory: Optional[Callable[[Callable[[], None]], Ticker]] = Ticker,
    ) -> None:
        self.store = store
        self.events = events or EventBus()
        self._rng = rng
        self._clock = clock
        self._ticker_factory = ticker_factory
        self._ticker: Optional[Ticker] = None
        self._lock = threading.RLock()
        self._session = new_session(config)
        self.last_save_ok: Optional[bool] = None

    @property
    def session(self) -> TestSession:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    def _now(self) -> int:
        return self._clock() if self._clock is not None else as_ms(None)

    # --- config ---

    def configure(self, *, count: Optional[int] = None, duration_minutes: Optional[int] = None) -> TestSession:
        with self._lock:
            self._session = configure(self._session, count=count, duration_minutes=duration_minutes)
            return self._session

    def start(self, problems: Optional[Iterable[ProblemRecord]] = None) -> TestSession:
        """Start a session over ``problems`` (default: every stored problem)."""
        pool = list(problems) if problems is not None else self.store.list_problems()
        with self._lock:
            self._session = start(self._session, pool, self._rng)
            s = self._session
        payload = {"total": s.total, "duration_minutes": s.config.duration_minutes, "pool": len(pool)}
        xtrace("session_started", payload)
        self.events.emit(ev.SESSION_STARTED, s)
        self._start_ticker(s.session_id)
        return s

    # --- running ---

    def reveal(self) -> TestSession:
        with self._lock:
            self._session = reveal_solution(self._session)
            return self._session

    def record(self, outcome: str) -> TestSession:
        with self._lock:
            self._session = record_outcome(self._session, outcome, self._now())
            s = self._session
            if s.state is SessionState.RESULTS:
                self._on_finished(s)
        if s.state is SessionState.RUNNING:
            xtrace("question_advanced", {"index": s.current_index, "answered": s.answered})
            self.events.emit(ev.QUESTION_ADVANCED, s)
        else:
            self._stop_ticker()
        return s

    def tick(self, session_id: Optional[str] = None) -> TestSession:
        """Apply one timer tick. A tick tagged for another session is dropped."""
        with self._lock:
            s = self._session
            if s.state is not SessionState.RUNNING:
                return s
            if session_id is not None and session_id != s.session_id:
                return s
            self._session = tick(s, self._now())
            s = self._session
            if s.state is SessionState.RESULTS:
                xtrace("time_up", {"answered": s.answered, "total": s.total})
                self._on_finished(s)
        if s.state is SessionState.RUNNING:
            self.events.emit(ev.TICK, s.time_left)
        else:
            self._stop_ticker()
        return s

    def finish(self) -> TestSession:
        """End the running session now and score what has been answered."""
        with self._lock:
            self._session = finalize(self._session, self._now())
            s = self._session
            self._on_finished(s)
        self._stop_ticker()
        return s

    # --- leaving ---

    def cancel(self) -> TestSession:
        """Back to config. A running session is discarded without saving."""
        with self._lock:
            was = self._session.state
            self._session = return_to_config(self._session)
            s = self._session
        self._stop_ticker()
        if was is SessionState.RUNNING:
            xtrace("session_cancelled", {})
            self.events.emit(ev.SESSION_CANCELLED, s)
        return s

    def new_test(self) -> TestSession:
        return self.cancel()

    def close(self) -> None:
        self._stop_ticker()

    # --- internals ---

    def _on_finished(self, s: TestSession) -> None:
        result = s.result
        assert result is not None
        xtrace("session_finished", {"score": result.score, "total": result.total, "duration_s": result.duration_seconds})
        self.events.emit(ev.SESSION_FINISHED, s)
        ok = False
        try:
            ok = bool(self.store.save_test_result(result))
        except (PersistenceUnavailable, OSError) as e:
            logger.error("Failed to save test result %s: %s", result.id, e)
        self.last_save_ok = ok
        if ok:
            self.events.emit(ev.RESULT_SAVED, result)
        else:
            logger.warning("Test result %s was not saved; showing results anyway", result.id)
            self.events.emit(ev.RESULT_SAVE_FAILED, result)

    def _start_ticker(self, session_id: str) -> None:
        if self._ticker_factory is None:
            return
        self._stop_ticker()
        self._ticker = self._ticker_factory(lambda: self.tick(session_id))
        self._ticker.start()

    def _stop_ticker(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.stop()
