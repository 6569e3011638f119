from .config import AnalyticsConfig
from .metrics import chart_data, summarize_history
from .prepare import export_ndjson, history_frame
from .smoothing import ewma_scores
from .plots import plot_activity_heatmap, plot_box_distribution, plot_score_trend

__all__ = [
    "AnalyticsConfig",
    "chart_data",
    "summarize_history",
    "export_ndjson",
    "history_frame",
    "ewma_scores",
    "plot_activity_heatmap",
    "plot_box_distribution",
    "plot_score_trend",
]
