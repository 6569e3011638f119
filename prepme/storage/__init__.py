from .schema import (
    DIFFICULTIES,
    MAX_BOX,
    MIN_BOX,
    OUTCOMES,
    ProblemRecord,
    TestResult,
)
from .store import HISTORY_FILE, ProblemStore, sanitize_id

__all__ = [
    "DIFFICULTIES",
    "MAX_BOX",
    "MIN_BOX",
    "OUTCOMES",
    "ProblemRecord",
    "TestResult",
    "HISTORY_FILE",
    "ProblemStore",
    "sanitize_id",
]
