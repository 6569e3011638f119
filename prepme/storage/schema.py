from __future__ import annotations

"""Schema constants and Pydantic models for problem records and test results.

Documents are stored with the camelCase keys used by the desktop app
(``platformId``, ``lastUpdated``, ``nextReviewDate``, ``durationSeconds``);
Python code uses the snake_case attribute names.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Constants ---

MIN_BOX = 1
MAX_BOX = 5
DIFFICULTIES = ("easy", "medium", "hard")
OUTCOMES = ("pass", "fail")

Difficulty = Literal["easy", "medium", "hard"]
Outcome = Literal["pass", "fail"]


# --- Pydantic models ---

class ProblemRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(min_length=1)
    notes: str = ""
    solution: str = ""
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    platform_id: Optional[str] = Field(default=None, alias="platformId")
    timestamp: Optional[int] = Field(default=None, ge=0)
    last_updated: Optional[int] = Field(default=None, alias="lastUpdated", ge=0)
    box: Optional[int] = Field(default=None, ge=MIN_BOX, le=MAX_BOX)
    last_reviewed: Optional[int] = Field(default=None, alias="lastReviewed", ge=0)
    next_review_date: Optional[int] = Field(default=None, alias="nextReviewDate", ge=0)
    difficulty: Optional[Difficulty] = None

    @field_validator("id")
    @classmethod
    def _strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("id must be non-empty")
        return v

    @field_validator("notes", "solution", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def current_box(self) -> int:
        """Spaced-repetition box; a record that was never reviewed sits in box 1."""
        return self.box if self.box is not None else MIN_BOX

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ProblemRecord":
        return cls.model_validate(data)


class TestResult(BaseModel):
    __test__ = False  # not a pytest test class

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    timestamp: int = Field(ge=0)
    score: int = Field(ge=0)
    total: int = Field(ge=0)
    duration_seconds: int = Field(alias="durationSeconds", ge=0)

    @model_validator(mode="after")
    def _score_le_total(self) -> "TestResult":
        if self.score > self.total:
            raise ValueError("score must be <= total")
        return self

    @property
    def percent(self) -> int:
        """Rounded percentage score; 0 for an empty session."""
        if self.total <= 0:
            return 0
        return int(round(self.score / self.total * 100))

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TestResult":
        return cls.model_validate(data)
