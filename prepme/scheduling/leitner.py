from __future__ import annotations

"""Leitner-box review scheduling.

A problem lives in one of five boxes. Each review moves it:

    easy   -> one box up (capped at 5)
    medium -> same box
    hard   -> back to box 1

and schedules the next review ``INTERVAL_DAYS[new_box]`` days later.
"""

from datetime import datetime
from typing import Dict, Iterable, List

from ..storage.schema import DIFFICULTIES, MAX_BOX, MIN_BOX, ProblemRecord
from ..util.timeutil import DAY_MS, as_datetime, as_ms, local_day

INTERVAL_DAYS: Dict[int, int] = {1: 1, 2: 3, 3: 7, 4: 14, 5: 30}

MASTERED_BOX = 3
FILTERS = ("all", "due", "reviewed", "mastered")


def next_box(current_box: int, outcome: str) -> int:
    if outcome == "easy":
        return min(current_box + 1, MAX_BOX)
    if outcome == "medium":
        return current_box
    if outcome == "hard":
        return MIN_BOX
    raise ValueError(f"Unknown review outcome: {outcome!r} (expected one of {DIFFICULTIES})")


def interval_days(box: int) -> int:
    return INTERVAL_DAYS[box]


def review(record: ProblemRecord, outcome: str, now: datetime | int | None = None) -> ProblemRecord:
    """Return a copy of ``record`` rescheduled for the given self-reported outcome.

    Sets box, lastReviewed, nextReviewDate and difficulty; every other field
    is carried over unchanged. Nothing is persisted here.
    """
    ts = as_ms(now)
    box = next_box(record.current_box, outcome)
    return record.model_copy(
        update={
            "box": box,
            "last_reviewed": ts,
            "next_review_date": ts + interval_days(box) * DAY_MS,
            "difficulty": outcome,
        }
    )


def is_due(record: ProblemRecord, now: datetime | int | None = None) -> bool:
    return record.next_review_date is None or record.next_review_date <= as_ms(now)


def due_problems(problems: Iterable[ProblemRecord], now: datetime | int | None = None) -> List[ProblemRecord]:
    ts = as_ms(now)
    return [p for p in problems if is_due(p, ts)]


def mastered_problems(problems: Iterable[ProblemRecord], mastered_box: int = MASTERED_BOX) -> List[ProblemRecord]:
    # never-reviewed problems count as box 0 here
    return [p for p in problems if (p.box or 0) > mastered_box]


def reviewed_today(problems: Iterable[ProblemRecord], now: datetime | int | None = None) -> List[ProblemRecord]:
    today = as_datetime(now).date()
    return [p for p in problems if p.last_reviewed and local_day(p.last_reviewed) == today]


def filter_problems(
    problems: Iterable[ProblemRecord],
    kind: str = "due",
    now: datetime | int | None = None,
    *,
    mastered_box: int = MASTERED_BOX,
) -> List[ProblemRecord]:
    """Revision-hub filter: all | due | reviewed (today) | mastered."""
    problems = list(problems)
    if kind == "all":
        return problems
    if kind == "due":
        return due_problems(problems, now)
    if kind == "reviewed":
        return reviewed_today(problems, now)
    if kind == "mastered":
        return mastered_problems(problems, mastered_box)
    raise ValueError(f"Unknown filter: {kind!r} (expected one of {FILTERS})")
