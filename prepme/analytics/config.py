from __future__ import annotations

"""Analytics configuration using Pydantic."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Parameters for test-history analytics.

    - chart_window: how many of the most recent tests the score chart shows (>0)
    - smoothing_span: EWMA span in tests (>1)
    """

    chart_window: int = Field(10, gt=0)
    smoothing_span: int = Field(5, gt=1)

    @classmethod
    def from_app_config(cls, cfg: Dict[str, Any]) -> "AnalyticsConfig":
        section = cfg.get("analytics", {}) or {}
        return cls(**{k: section[k] for k in ("chart_window", "smoothing_span") if k in section})
