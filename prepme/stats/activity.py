from __future__ import annotations

"""Practice activity: active calendar days, current streak, 30-day heatmap.

A day is "active" when any problem was created, updated or reviewed on it,
or a test was finished on it. Days are local calendar days.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Set

from ..storage.schema import ProblemRecord, TestResult
from ..util.timeutil import as_datetime, local_day

HEATMAP_DAYS = 30


@dataclass(frozen=True)
class HeatmapDay:
    date: date
    active: bool
    is_today: bool


@dataclass
class ActivityReport:
    current_streak: int
    active_dates: Set[date] = field(default_factory=set)
    heatmap: List[HeatmapDay] = field(default_factory=list)


def active_dates(problems: Iterable[ProblemRecord], test_results: Iterable[TestResult]) -> Set[date]:
    days: Set[date] = set()
    for p in problems:
        for ts in (p.timestamp, p.last_reviewed, p.last_updated):
            if ts:
                days.add(local_day(ts))
    for t in test_results:
        if t.timestamp:
            days.add(local_day(t.timestamp))
    return days


def current_streak(days: Set[date], today: date) -> int:
    """Consecutive active days ending today, or ending yesterday if today is idle."""
    one = timedelta(days=1)
    yesterday = today - one
    if today in days:
        streak = 1
        cursor = yesterday
    elif yesterday in days:
        # yesterday is counted by the walk below
        streak = 0
        cursor = yesterday
    else:
        return 0
    while cursor in days:
        streak += 1
        cursor -= one
    return streak


def heatmap(days: Set[date], today: date, length: int = HEATMAP_DAYS) -> List[HeatmapDay]:
    """``length`` days ending today, oldest first."""
    out: List[HeatmapDay] = []
    for i in range(length - 1, -1, -1):
        d = today - timedelta(days=i)
        out.append(HeatmapDay(date=d, active=d in days, is_today=(i == 0)))
    return out


def compute_activity(
    problems: Iterable[ProblemRecord],
    test_results: Iterable[TestResult],
    now: Optional[datetime | int] = None,
    *,
    length: int = HEATMAP_DAYS,
) -> ActivityReport:
    today = as_datetime(now).date()
    days = active_dates(problems, test_results)
    return ActivityReport(
        current_streak=current_streak(days, today),
        active_dates=days,
        heatmap=heatmap(days, today, length),
    )
