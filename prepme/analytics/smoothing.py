from __future__ import annotations

"""Smoothing utilities (EWMA over test order)."""

import pandas as pd


def ewma_scores(df: pd.DataFrame, span: int, value_col: str = "pct") -> pd.DataFrame:
    """Return a copy of df (sorted by timestamp) with ``f"{value_col}_smooth"`` added."""
    g = df.sort_values("timestamp", kind="stable").copy()
    g[f"{value_col}_smooth"] = g[value_col].astype("float64").ewm(span=span).mean().astype("float32")
    return g
