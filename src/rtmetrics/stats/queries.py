"""
Read-side views over the collector state.

These functions build the payloads consumed by the dashboard: the cheap
"recent stats" view, per-thread chart series and the windowed performance
summary. They only read the entries they are given.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import polars as pl

from ..models.config import SummaryConfig
from ..models.log import DataEntry, LogEntry, entry_to_dict
from ..models.perf import PerfBoundaries, PerfCounts, is_valid_thread_name

logger = logging.getLogger(__name__)

FAIL_INVALID_THREAD_NAME = "invalid_thread_name"
FAIL_DATA_UNAVAILABLE = "data_unavailable"


@dataclass(frozen=True)
class ChartFailure:
    fail_reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"fail_reason": self.fail_reason}


@dataclass(frozen=True)
class ChartData:
    """
    Chart series for a single thread.

    Attributes:
        boundaries: Histogram boundaries of every data point in the log.
        thread_perf_log: The full log in JSON form, with the ``perf`` field of
            each data point narrowed to the requested thread.
    """

    boundaries: PerfBoundaries
    thread_perf_log: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {"boundaries": list(self.boundaries), "threadPerfLog": self.thread_perf_log}


ChartResult = Union[ChartData, ChartFailure]


@dataclass(frozen=True)
class PerfSummary:
    """
    Windowed performance summary of the main thread.

    Attributes:
        snaps: Number of data points that qualified for the summary.
        freqs: Share of ticks that fell in each histogram bucket.
        players: Median online player count.
        fxs_memory: Median server memory in MiB, None if never known.
        node_memory: Median host runtime memory in MiB, None if never known.
    """

    snaps: int
    freqs: List[float]
    players: Optional[float]
    fxs_memory: Optional[float]
    node_memory: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snaps": self.snaps,
            "freqs": self.freqs,
            "players": self.players,
            "fxsMemory": self.fxs_memory,
            "nodeMemory": self.node_memory,
        }


@dataclass(frozen=True)
class RecentStats:
    """Live values of the collector, without scanning the log."""

    fxs_memory: Optional[float] = None
    node_memory: Optional[Dict[str, int]] = None
    perf_boundaries: Optional[PerfBoundaries] = None
    perf_bucket_counts: Optional[Dict[str, List[int]]] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fxsMemory": self.fxs_memory,
            "nodeMemory": self.node_memory,
            "perfBoundaries": self.perf_boundaries,
            "perfBucketCounts": self.perf_bucket_counts,
        }


def build_recent_stats(
    fxs_memory: Optional[float],
    node_memory: Optional[Dict[str, int]],
    boundaries: Optional[PerfBoundaries],
    live_delta: Optional[PerfCounts],
) -> RecentStats:
    bucket_counts = None
    if live_delta is not None:
        bucket_counts = {name: list(perf.buckets) for name, perf in live_delta.threads()}
    return RecentStats(
        fxs_memory=fxs_memory,
        node_memory=dict(node_memory) if node_memory is not None else None,
        perf_boundaries=list(boundaries) if boundaries is not None else None,
        perf_bucket_counts=bucket_counts,
    )


def build_chart_data(
    thread_name: str,
    entries: Sequence[LogEntry],
    boundaries: Optional[PerfBoundaries],
) -> ChartResult:
    """
    Build the chart series of one thread.

    Args:
        thread_name: One of the monitored thread names
        entries: The stats log
        boundaries: The current histogram boundaries, None if unknown

    Returns:
        ChartData, or a ChartFailure tagged ``invalid_thread_name`` for an
        unknown thread or ``data_unavailable`` when there is nothing to chart.
    """
    if not is_valid_thread_name(thread_name):
        return ChartFailure(FAIL_INVALID_THREAD_NAME)
    if not entries or not boundaries:
        return ChartFailure(FAIL_DATA_UNAVAILABLE)

    thread_perf_log = []
    for entry in entries:
        item = entry_to_dict(entry)
        if isinstance(entry, DataEntry):
            item["perf"] = entry.perf.thread(thread_name).to_dict()
        thread_perf_log.append(item)
    return ChartData(boundaries=list(boundaries), thread_perf_log=thread_perf_log)


def build_perf_summary(
    entries: Sequence[LogEntry],
    now_ms: int,
    min_ticks: int,
    config: Optional[SummaryConfig] = None,
) -> Optional[PerfSummary]:
    """
    Summarize the main thread's performance over the trailing window.

    Only data points inside the window whose main-thread tick count reaches
    ``min_ticks`` qualify. Medians ignore unknown (None) values.

    Args:
        entries: The stats log
        now_ms: Current time in epoch milliseconds
        min_ticks: Minimum main-thread ticks for a data point to qualify
        config: Window size and minimum number of qualifying data points

    Returns:
        The summary, or None when fewer than ``config.min_snapshots`` data
        points qualify.
    """
    config = config or SummaryConfig()
    window_start = now_ms - int(config.window_hours * 60 * 60 * 1000)

    qualifying = [
        entry for entry in entries
        if isinstance(entry, DataEntry)
        and entry.ts >= window_start
        and entry.perf.svMain.count >= min_ticks
    ]
    if len(qualifying) < config.min_snapshots:
        logger.debug(
            f"Not enough data for a performance summary: {len(qualifying)} of "
            f"{config.min_snapshots} snapshots in the last {config.window_hours}h"
        )
        return None

    values = pl.DataFrame(
        {
            "players": [entry.players for entry in qualifying],
            "fxsMemory": [entry.fxs_memory for entry in qualifying],
            "nodeMemory": [entry.node_memory for entry in qualifying],
        },
        schema={"players": pl.Float64, "fxsMemory": pl.Float64, "nodeMemory": pl.Float64},
    )
    medians = values.select(pl.all().median()).row(0, named=True)

    bucket_count = max(len(entry.perf.svMain.buckets) for entry in qualifying)
    cum_buckets: List[int] = []
    if bucket_count:
        buckets = pl.DataFrame(
            [
                list(entry.perf.svMain.buckets) + [0] * (bucket_count - len(entry.perf.svMain.buckets))
                for entry in qualifying
            ],
            schema=[f"b{i}" for i in range(bucket_count)],
            orient="row",
        )
        cum_buckets = list(buckets.sum().row(0))
    cum_ticks = sum(cum_buckets)
    freqs = [b / cum_ticks if cum_ticks else 0.0 for b in cum_buckets]

    return PerfSummary(
        snaps=len(qualifying),
        freqs=freqs,
        players=medians["players"],
        fxs_memory=medians["fxsMemory"],
        node_memory=medians["nodeMemory"],
    )
