from .activity import ActivityReport, HeatmapDay, active_dates, compute_activity, current_streak, heatmap
from .stats import format_heatmap, format_summary, revision_summary

__all__ = [
    "ActivityReport",
    "HeatmapDay",
    "active_dates",
    "compute_activity",
    "current_streak",
    "heatmap",
    "format_heatmap",
    "format_summary",
    "revision_summary",
]
