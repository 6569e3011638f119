from __future__ import annotations

"""Problem capture, note saving and review actions against a ProblemStore.

A problem is created either from a user-typed id or by capturing the page
currently shown in the browser pane (title/url/description). Every save
stamps ``lastUpdated``, which also feeds the activity streak.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol

from ..scheduling.leitner import review
from ..storage.schema import MIN_BOX, ProblemRecord
from ..storage.store import sanitize_id
from ..util.timeutil import as_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageDetails:
    title: str = ""
    url: str = ""
    description: str = ""


class PageDetailsSource(Protocol):
    def get_page_details(self) -> PageDetails: ...


def slug_from_url(url: str, now: Any = None) -> str:
    """Last non-empty path segment of ``url`` without its query string."""
    parts = [p for p in url.split("/") if p]
    slug = parts[-1] if parts else ""
    slug = slug.split("?", 1)[0]
    if not slug:
        slug = f"page-{as_ms(now)}"
    return slug


def unique_id(base: str, existing_ids: Iterable[str]) -> str:
    """``base`` or ``base-N``, whichever does not share a storage key with an existing id."""
    taken = {sanitize_id(i) for i in existing_ids}
    candidate = base
    counter = 1
    while sanitize_id(candidate) in taken:
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


def save_problem_fields(
    store: Any,
    current: Optional[ProblemRecord],
    updates: Dict[str, Any],
    *,
    problem_id: Optional[str] = None,
    now: Any = None,
) -> Optional[ProblemRecord]:
    """Merge ``updates`` over ``current``, stamp lastUpdated and persist.

    Returns the merged record, or None if there is no id to save under.
    The merged record is returned even when the write fails; the failure is
    logged by the store.
    """
    target = problem_id or (current.id if current else None) or updates.get("id")
    if not target:
        return None
    data = current.model_dump() if current is not None else {}
    data.update(updates)
    data["id"] = target
    data["last_updated"] = as_ms(now)
    merged = ProblemRecord.model_validate(data)
    res = store.save_problem(merged)
    if not res.get("success"):
        logger.warning("Problem %s could not be saved", target)
    return merged


def create_problem(store: Any, problem_id: str, *, now: Any = None, **fields: Any) -> ProblemRecord:
    """Create (or return the existing) problem for a user-supplied id."""
    existing = store.load_problem(problem_id)
    if existing is not None:
        if fields:
            return save_problem_fields(store, existing, fields, now=now)
        return existing
    ts = as_ms(now)
    initial = {"notes": "", "solution": "", "box": MIN_BOX, "timestamp": ts, "platform_id": "manual"}
    initial.update(fields)
    return save_problem_fields(store, None, initial, problem_id=problem_id, now=ts)


def capture_page(
    store: Any,
    details: PageDetails,
    *,
    active: Optional[ProblemRecord] = None,
    platform_id: Optional[str] = None,
    now: Any = None,
) -> Optional[ProblemRecord]:
    """Save the page shown in the browser as a problem.

    - a URL that is already saved updates that problem's capture metadata;
    - the active problem is updated when it has no URL or the same URL;
    - otherwise a new problem is created with an id derived from the URL slug.
    """
    if not details.url:
        return None
    ts = as_ms(now)
    problems = store.list_problems()
    existing = next((p for p in problems if p.url == details.url), None)

    updates: Dict[str, Any] = {
        "title": details.title,
        "url": details.url,
        "description": details.description,
        "platform_id": platform_id or "manual",
    }
    if existing is not None:
        logger.info("Re-capturing %s into existing problem %s", details.url, existing.id)
        return save_problem_fields(store, existing, updates, now=ts)

    if active is not None and (not active.url or active.url == details.url):
        return save_problem_fields(store, active, updates, now=ts)

    new_id = unique_id(slug_from_url(details.url, ts), (p.id for p in problems))
    updates.update({"timestamp": ts, "notes": "", "solution": "", "box": MIN_BOX})
    logger.info("Capturing new problem %s from %s", new_id, details.url)
    return save_problem_fields(store, None, updates, problem_id=new_id, now=ts)


def capture_from(source: PageDetailsSource, store: Any, **kwargs: Any) -> Optional[ProblemRecord]:
    return capture_page(store, source.get_page_details(), **kwargs)


def review_problem(store: Any, problem_id: str, outcome: str, *, now: Any = None) -> Optional[ProblemRecord]:
    """Apply a review outcome to a stored problem and persist it."""
    record = store.load_problem(problem_id)
    if record is None:
        return None
    ts = as_ms(now)
    updated = review(record, outcome, ts)
    return save_problem_fields(store, record, {
        "box": updated.box,
        "last_reviewed": updated.last_reviewed,
        "next_review_date": updated.next_review_date,
        "difficulty": updated.difficulty,
    }, now=ts)
