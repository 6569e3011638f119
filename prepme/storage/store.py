from __future__ import annotations

"""JSON file store for problem records and the test-result history.

Layout (one directory, ``~/PrepMe`` by default):

    <data_dir>/<safe_id>.json       one problem record per file
    <data_dir>/test_history.json    ordered list of test results (append-only)

Every public method recovers persistence failures at the boundary: reads
return ``None``/``[]`` and writes return a falsy status, so a failed save
never takes down an in-progress session.
"""

import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..errors import MalformedRecord, PersistenceUnavailable
from .schema import ProblemRecord, TestResult

logger = logging.getLogger(__name__)

HISTORY_FILE = "test_history.json"

_UNSAFE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def sanitize_id(problem_id: str) -> str:
    """Map an identifier onto the restricted storage-key charset ([A-Za-z0-9_])."""
    return _UNSAFE.sub("_", str(problem_id))


def coerce_problem(data: Any) -> ProblemRecord:
    """Validate a decoded JSON document as a problem record.

    Raises MalformedRecord for arrays, scalars, documents without a non-empty
    ``id`` and documents whose fields fail validation.
    """
    if not isinstance(data, dict):
        raise MalformedRecord(f"expected an object, got {type(data).__name__}")
    if not data.get("id"):
        raise MalformedRecord("missing id")
    try:
        return ProblemRecord.from_json(data)
    except ValidationError as e:
        raise MalformedRecord(str(e)) from e


class ProblemStore:
    """Durable key-value storage of problems plus an append-only result list."""

    def __init__(self, data_dir: Path | str, *, history_file: str = HISTORY_FILE) -> None:
        self.data_dir = Path(data_dir).expanduser()
        self.history_file = history_file
        # Serializes same-id saves and history read-modify-write appends.
        self._lock = threading.RLock()

    # --- paths ---

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_file

    def _is_history(self, name: str) -> bool:
        return name.casefold() == self.history_file.casefold()

    def problem_path(self, problem_id: str) -> Path:
        """File for a problem id. Never the history file.

        Sanitized keys contain no dots, so an id whose plain file name would
        be the history file is stored as ``<key>.problem.json`` instead.
        """
        key = sanitize_id(problem_id)
        name = f"{key}.json"
        if self._is_history(name):
            name = f"{key}.problem.json"
        return self.data_dir / name

    # --- low-level I/O ---

    def _ensure_dir(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceUnavailable(self.data_dir, e) from e

    def _read_json(self, path: Path) -> Any:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceUnavailable(path, e) from e

    def _write_json(self, path: Path, data: Any) -> None:
        self._ensure_dir()
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(self.data_dir), prefix=".tmp-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceUnavailable(path, e) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name)

    # --- problems ---

    def save_problem(self, record: ProblemRecord) -> Dict[str, Any]:
        """Upsert a problem by id. Returns ``{"success": bool, "path": str | None}``."""
        path = self.problem_path(record.id)
        logger.info("Saving problem %s to %s", record.id, path)
        with self._lock:
            try:
                self._write_json(path, record.to_json())
            except PersistenceUnavailable as e:
                logger.error("Failed to save problem %s: %s", record.id, e)
                return {"success": False, "path": None}
        return {"success": True, "path": str(path)}

    def load_problem(self, problem_id: str) -> Optional[ProblemRecord]:
        """Problem by id, or None if absent or unreadable."""
        path = self.problem_path(problem_id)
        if not path.exists():
            return None
        try:
            return coerce_problem(self._read_json(path))
        except PersistenceUnavailable as e:
            logger.warning("Could not read problem %s: %s", problem_id, e)
            return None
        except MalformedRecord as e:
            logger.debug("Problem file %s is malformed: %s", path, e)
            return None

    def list_problems(self) -> List[ProblemRecord]:
        """All well-formed problem records; malformed files are skipped."""
        try:
            self._ensure_dir()
            files = sorted(self.data_dir.glob("*.json"))
        except (PersistenceUnavailable, OSError) as e:
            logger.warning("Could not list problems in %s: %s", self.data_dir, e)
            return []
        problems: List[ProblemRecord] = []
        for f in files:
            if self._is_history(f.name) or f.name.startswith(".tmp-"):
                continue
            try:
                problems.append(coerce_problem(self._read_json(f)))
            except (PersistenceUnavailable, MalformedRecord) as e:
                logger.debug("Skipping %s: %s", f.name, e)
        return problems

    def delete_problem(self, problem_id: str) -> bool:
        path = self.problem_path(problem_id)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                logger.error("Failed to delete problem %s: %s", problem_id, e)
                return False
        return True

    # --- test history ---

    def _read_history(self) -> List[Any]:
        if not self.history_path.exists():
            return []
        try:
            data = self._read_json(self.history_path)
        except PersistenceUnavailable as e:
            logger.warning("Test history unreadable, treating as empty: %s", e)
            return []
        if not isinstance(data, list):
            logger.warning("Test history at %s is not a list, treating as empty", self.history_path)
            return []
        return data

    def save_test_result(self, result: TestResult) -> bool:
        """Append one result to the history list. Read-modify-write is atomic per call."""
        with self._lock:
            history = self._read_history()
            history.append(result.to_json())
            try:
                self._write_json(self.history_path, history)
            except PersistenceUnavailable as e:
                logger.error("Failed to save test result %s: %s", result.id, e)
                return False
        logger.info("Saved test result %s (%d/%d)", result.id, result.score, result.total)
        return True

    def get_test_results(self) -> List[TestResult]:
        """Ordered history; [] if absent or unreadable. Malformed entries are skipped."""
        results: List[TestResult] = []
        for entry in self._read_history():
            if not isinstance(entry, dict):
                continue
            try:
                results.append(TestResult.from_json(entry))
            except ValidationError as e:
                logger.debug("Skipping malformed test result: %s", e)
        return results
