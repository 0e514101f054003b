"""
Stats log compaction.

Data points are collected every few minutes; kept forever that would grow
the state file without bound. The optimizer downsamples data points by age:

    age < full_resolution_hours   untouched
    up to 24 hours                one point per 15 minutes
    up to 7 days                  one point per 30 minutes
    up to 14 days                 one point per hour
    up to retention_days          one point per 4 hours
    older                         dropped

Consecutive data points that fall in the same tier and in the same
epoch-aligned slot of that tier's resolution are merged into one, unless a
boot or close entry sits between them. Boot and close entries are always
kept as they are.

The optimizer is a pure function: it never mutates its input and always
returns a new list.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models.config import OptimizerConfig
from ..models.log import BootEntry, CloseEntry, DataEntry, LogEntry
from ..models.perf import PerfCounts, ThreadPerf

logger = logging.getLogger(__name__)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# (upper age bound, resolution); the last bound is replaced by the retention age.
_DEFAULT_STEPS: Tuple[Tuple[Optional[int], int], ...] = (
    (DAY_MS, 15 * MINUTE_MS),
    (7 * DAY_MS, 30 * MINUTE_MS),
    (14 * DAY_MS, HOUR_MS),
    (None, 4 * HOUR_MS),
)


@dataclass(frozen=True)
class ResolutionTier:
    """
    A band of entry ages sharing one merge resolution.

    Attributes:
        max_age_ms: Exclusive upper bound of the entry age for this tier.
        resolution_ms: Width of the epoch-aligned merge slot.
    """

    max_age_ms: int
    resolution_ms: int


def build_resolution_tiers(config: OptimizerConfig) -> List[ResolutionTier]:
    """
    Build the ordered list of merge tiers for a configuration.

    Tiers that would end before the full-resolution window are skipped and
    tiers reaching past the retention age are cut at that age.
    """
    full_resolution_ms = int(config.full_resolution_hours * HOUR_MS)
    retention_ms = int(config.retention_days * DAY_MS)

    tiers: List[ResolutionTier] = []
    for max_age_ms, resolution_ms in _DEFAULT_STEPS:
        upper = retention_ms if max_age_ms is None else min(max_age_ms, retention_ms)
        if upper <= full_resolution_ms:
            continue
        if tiers and upper <= tiers[-1].max_age_ms:
            continue
        tiers.append(ResolutionTier(max_age_ms=upper, resolution_ms=resolution_ms))
    return tiers


def _sum_perfs(perfs: Sequence[PerfCounts]) -> PerfCounts:
    summed = {}
    for name, first in perfs[0].threads():
        count = first.count
        buckets = list(first.buckets)
        for perf in perfs[1:]:
            other = perf.thread(name)
            count += other.count
            buckets = [a + b for a, b in zip(buckets, other.buckets)]
        summed[name] = ThreadPerf(count=count, buckets=tuple(buckets))
    return PerfCounts(**summed)


def _mean_or_none(values: Sequence[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 2)


def merge_data_entries(entries: Sequence[DataEntry]) -> DataEntry:
    """
    Merge several data points into one representative point.

    The merged point takes the last timestamp, the sum of the perf deltas,
    the rounded mean player count and the mean of the known memory values.
    """
    if not entries:
        raise ValueError("Cannot merge an empty list of data entries")
    if len(entries) == 1:
        return entries[0]
    return DataEntry(
        ts=entries[-1].ts,
        players=int(round(sum(e.players for e in entries) / len(entries))),
        fxs_memory=_mean_or_none([e.fxs_memory for e in entries]),
        node_memory=_mean_or_none([e.node_memory for e in entries]),
        perf=_sum_perfs([e.perf for e in entries]),
    )


def optimize_stats_log(
    entries: Sequence[LogEntry],
    now_ms: int,
    config: Optional[OptimizerConfig] = None,
) -> List[LogEntry]:
    """
    Compact a stats log.

    Args:
        entries: The log, in append order
        now_ms: Current time in epoch milliseconds
        config: Compaction settings, defaults when None

    Returns:
        A new list of entries. Entries newer than the full-resolution window
        are returned unchanged.
    """
    config = config or OptimizerConfig()
    full_resolution_ms = int(config.full_resolution_hours * HOUR_MS)
    retention_ms = int(config.retention_days * DAY_MS)
    tiers = build_resolution_tiers(config)

    result: List[LogEntry] = []
    group: List[DataEntry] = []
    group_key: Optional[Tuple[int, int]] = None

    def flush() -> None:
        nonlocal group, group_key
        if group:
            result.append(merge_data_entries(group))
        group = []
        group_key = None

    dropped = 0
    for entry in entries:
        if isinstance(entry, (BootEntry, CloseEntry)):
            flush()
            result.append(entry)
            continue
        if not isinstance(entry, DataEntry):
            raise TypeError(f"Unknown stats log entry: {entry!r}")

        age_ms = now_ms - entry.ts
        if age_ms < full_resolution_ms:
            flush()
            result.append(entry)
            continue
        if age_ms >= retention_ms:
            dropped += 1
            continue

        tier_index = next(i for i, tier in enumerate(tiers) if age_ms < tier.max_age_ms)
        key = (tier_index, entry.ts // tiers[tier_index].resolution_ms)
        if key != group_key:
            flush()
            group_key = key
        group.append(entry)
    flush()

    if len(result) != len(entries):
        logger.debug(
            f"Stats log optimized from {len(entries)} to {len(result)} entries "
            f"({dropped} expired data points dropped)"
        )
    return result
