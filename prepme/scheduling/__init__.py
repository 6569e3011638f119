from .leitner import (
    INTERVAL_DAYS,
    FILTERS,
    due_problems,
    filter_problems,
    interval_days,
    is_due,
    mastered_problems,
    next_box,
    review,
    reviewed_today,
)

__all__ = [
    "INTERVAL_DAYS",
    "FILTERS",
    "due_problems",
    "filter_problems",
    "interval_days",
    "is_due",
    "mastered_problems",
    "next_box",
    "review",
    "reviewed_today",
]
