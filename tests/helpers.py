from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List

from prepme.storage.schema import ProblemRecord, TestResult
from prepme.util.timeutil import to_ms

NOON = datetime(2024, 3, 10, 12, 0, 0)


def day_ms(days_ago: int, base: datetime = NOON) -> int:
    return to_ms(base - timedelta(days=days_ago))


def problem(pid: str, **fields: Any) -> ProblemRecord:
    return ProblemRecord(id=pid, **fields)


def result(ts: int, score: int = 1, total: int = 2, duration: int = 60) -> TestResult:
    return TestResult(id=str(ts), timestamp=ts, score=score, total=total, duration_seconds=duration)


class MemoryStore:
    """In-memory stand-in for ProblemStore; can be told to fail writes."""

    def __init__(self, problems: List[ProblemRecord] | None = None, *, fail_writes: bool = False) -> None:
        self.problems: Dict[str, ProblemRecord] = {p.id: p for p in (problems or [])}
        self.results: List[TestResult] = []
        self.fail_writes = fail_writes

    def save_problem(self, record: ProblemRecord) -> Dict[str, Any]:
        if self.fail_writes:
            return {"success": False, "path": None}
        self.problems[record.id] = record
        return {"success": True, "path": f"mem://{record.id}"}

    def load_problem(self, problem_id: str):
        return self.problems.get(problem_id)

    def list_problems(self) -> List[ProblemRecord]:
        return list(self.problems.values())

    def save_test_result(self, result: TestResult) -> bool:
        if self.fail_writes:
            return False
        self.results.append(result)
        return True

    def get_test_results(self) -> List[TestResult]:
        return list(self.results)
