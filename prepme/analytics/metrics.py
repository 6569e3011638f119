from __future__ import annotations

"""History metrics: the score chart series and headline numbers."""

from typing import Any, Dict, List

import numpy as np
import pandas as pd

from ..util.timeutil import local_day


def chart_data(df: pd.DataFrame, window: int = 10) -> List[Dict[str, Any]]:
    """Last ``window`` tests as ``{"name": "Test i", "score": pct, "date": local date}``."""
    tail = df.sort_values("timestamp", kind="stable").tail(window)
    out: List[Dict[str, Any]] = []
    for i, row in enumerate(tail.itertuples(index=False), start=1):
        day = local_day(row.timestamp.timestamp() * 1000)
        out.append({"name": f"Test {i}", "score": int(row.pct), "date": day.isoformat()})
    return out


def summarize_history(df: pd.DataFrame) -> Dict[str, Any]:
    """Count, best/mean percentage, and total seconds spent in tests."""
    if df.empty:
        return {"tests": 0, "best_pct": None, "mean_pct": None, "total_seconds": 0, "questions": 0, "passed": 0}
    pct = df["pct"].astype("float64").to_numpy()
    return {
        "tests": int(len(df)),
        "best_pct": int(np.max(pct)),
        "mean_pct": float(np.round(np.mean(pct), 1)),
        "total_seconds": int(df["duration_seconds"].sum()),
        "questions": int(df["total"].sum()),
        "passed": int(df["score"].sum()),
    }
