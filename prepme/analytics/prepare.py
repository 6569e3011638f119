from __future__ import annotations

"""Turn the stored test history into a typed pandas DataFrame."""

from pathlib import Path
from typing import Iterable

import pandas as pd

from ..storage.schema import TestResult

COLUMNS = ["id", "timestamp", "score", "total", "duration_seconds", "pct"]


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": pd.Series(dtype="string"),
            "timestamp": pd.Series(dtype=pd.DatetimeTZDtype(tz="UTC")),
            "score": pd.Series(dtype="Int64"),
            "total": pd.Series(dtype="Int64"),
            "duration_seconds": pd.Series(dtype="Int64"),
            "pct": pd.Series(dtype="Int64"),
        }
    )


def history_frame(results: Iterable[TestResult]) -> pd.DataFrame:
    """One row per test, oldest first.

    ``pct`` is the rounded percentage score (0 for an empty test).
    """
    rows = [r.model_dump() for r in results]
    if not rows:
        return _empty_df()
    df = pd.DataFrame(rows)
    df["id"] = df["id"].astype("string")
    df["timestamp"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
    for col in ("score", "total", "duration_seconds"):
        df[col] = df[col].astype("Int64")
    total = df["total"].astype("float64")
    pct = (df["score"].astype("float64") / total.where(total > 0)) * 100
    df["pct"] = pct.fillna(0).round().astype("Int64")
    df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
    return df[COLUMNS]


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")
