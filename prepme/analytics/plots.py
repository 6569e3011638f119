from __future__ import annotations

"""Matplotlib plots for score trend, activity heatmap and box distribution."""

import os
from collections import Counter
from typing import Iterable, List, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from ..stats.activity import HeatmapDay  # noqa: E402
from ..storage.schema import MAX_BOX, MIN_BOX, ProblemRecord  # noqa: E402


def plot_score_trend(
    df: pd.DataFrame,
    *,
    value_col: str = "pct",
    save_path: Optional[str | os.PathLike[str]] = None,
) -> bool:
    """Score per test in order, with the EWMA line when present. False if no data."""
    if df.empty:
        return False
    g = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
    x = np.arange(1, len(g) + 1)
    plt.figure()
    plt.plot(x, g[value_col].astype("float64"), marker="o", linestyle="", label="score %")
    smooth_col = f"{value_col}_smooth"
    if smooth_col in g.columns:
        plt.plot(x, g[smooth_col], linewidth=2, label="score % (EWMA)")
    plt.ylim(0, 100)
    plt.xlabel("Test")
    plt.ylabel("Score (%)")
    plt.title("Mock test scores")
    plt.legend()
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
    return True


def plot_activity_heatmap(
    days: List[HeatmapDay],
    *,
    save_path: Optional[str | os.PathLike[str]] = None,
) -> bool:
    """One-row strip of the last N days; active days filled, today outlined."""
    if not days:
        return False
    M = np.array([[1.0 if d.active else 0.0 for d in days]])
    plt.figure(figsize=(max(4, len(days) * 0.3), 1.6))
    plt.imshow(M, aspect="auto", cmap="Greens", vmin=0, vmax=1)
    today = [i for i, d in enumerate(days) if d.is_today]
    for i in today:
        plt.gca().add_patch(plt.Rectangle((i - 0.5, -0.5), 1, 1, fill=False, edgecolor="orange", linewidth=2))
    step = max(1, len(days) // 6)
    ticks = list(range(0, len(days), step))
    plt.xticks(ticks=ticks, labels=[days[i].date.strftime("%b %d") for i in ticks])
    plt.yticks([])
    plt.title("Activity")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
    return True


def plot_box_distribution(
    problems: Iterable[ProblemRecord],
    *,
    save_path: Optional[str | os.PathLike[str]] = None,
) -> bool:
    """Bar chart of how many problems sit in each Leitner box."""
    counts = Counter(p.current_box for p in problems)
    if not counts:
        return False
    boxes = list(range(MIN_BOX, MAX_BOX + 1))
    plt.figure()
    plt.bar([str(b) for b in boxes], [counts.get(b, 0) for b in boxes])
    plt.xlabel("Box")
    plt.ylabel("Problems")
    plt.title("Problems per box")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
    return True
