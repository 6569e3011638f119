from __future__ import annotations

"""Revision-hub summary: aggregation and formatting."""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..scheduling.leitner import MASTERED_BOX, due_problems, mastered_problems, reviewed_today
from ..storage.schema import ProblemRecord, TestResult
from .activity import HEATMAP_DAYS, HeatmapDay, compute_activity


def revision_summary(
    problems: Iterable[ProblemRecord],
    test_results: Iterable[TestResult],
    now: Optional[datetime | int] = None,
    *,
    mastered_box: int = MASTERED_BOX,
    heatmap_days: int = HEATMAP_DAYS,
) -> Dict:
    """Counts shown on the revision hub plus the activity streak/heatmap."""
    problems = list(problems)
    test_results = list(test_results)
    activity = compute_activity(problems, test_results, now, length=heatmap_days)
    return {
        "total": len(problems),
        "due": len(due_problems(problems, now)),
        "reviewed_today": len(reviewed_today(problems, now)),
        "mastered": len(mastered_problems(problems, mastered_box)),
        "tests_taken": len(test_results),
        "current_streak": activity.current_streak,
        "heatmap": activity.heatmap,
    }


def format_heatmap(days: List[HeatmapDay]) -> str:
    """One character per day: '#' active, '.' idle; today is bracketed."""
    cells = []
    for d in days:
        ch = "#" if d.active else "."
        cells.append(f"[{ch}]" if d.is_today else ch)
    return "".join(cells)


def format_summary(summary: Dict) -> str:
    """Return a human-readable summary of the revision hub."""
    streak = int(summary.get("current_streak", 0))
    lines = [
        f"Problems: {summary.get('total', 0)}",
        f"Due for review: {summary.get('due', 0)}",
        f"Reviewed today: {summary.get('reviewed_today', 0)}",
        f"Mastered: {summary.get('mastered', 0)}",
        f"Tests taken: {summary.get('tests_taken', 0)}",
        f"Current streak: {streak} day{'s' if streak != 1 else ''}",
    ]
    days = summary.get("heatmap") or []
    if days:
        lines.append(f"Last {len(days)} days: {format_heatmap(days)}")
    return "\n".join(lines)
