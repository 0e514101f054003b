"""
Stats processing for the rtmetrics package.

- perf_diff: deltas between cumulative counter snapshots and reset detection
- stats_log: the in-memory, append-only history of boots, closes and data points
- log_optimizer: age-tiered compaction of the history
- queries: chart, summary and live views for the dashboard
"""

from .log_optimizer import (
    ResolutionTier,
    build_resolution_tiers,
    merge_data_entries,
    optimize_stats_log,
)
from .perf_diff import did_perf_reset, diff_perfs
from .queries import (
    FAIL_DATA_UNAVAILABLE,
    FAIL_INVALID_THREAD_NAME,
    ChartData,
    ChartFailure,
    ChartResult,
    PerfSummary,
    RecentStats,
    build_chart_data,
    build_perf_summary,
    build_recent_stats,
)
from .stats_log import StatsLog

__all__ = [
    "ResolutionTier",
    "build_resolution_tiers",
    "merge_data_entries",
    "optimize_stats_log",
    "did_perf_reset",
    "diff_perfs",
    "FAIL_DATA_UNAVAILABLE",
    "FAIL_INVALID_THREAD_NAME",
    "ChartData",
    "ChartFailure",
    "ChartResult",
    "PerfSummary",
    "RecentStats",
    "build_chart_data",
    "build_perf_summary",
    "build_recent_stats",
    "StatsLog",
]
