"""
Delta computation between cumulative performance snapshots.

The server exposes monotonically increasing counters. A delta between two
snapshots describes the activity in the elapsed interval; a decrease in any
counter means the server reinitialized its counters and the older snapshot
can no longer be used as a baseline.
"""

from typing import Optional

from ..models.perf import PerfCounts, ThreadPerf


def _diff_thread(current: ThreadPerf, previous: ThreadPerf) -> ThreadPerf:
    if len(current.buckets) != len(previous.buckets):
        raise ValueError(
            f"Cannot diff histograms of different sizes ({len(current.buckets)} vs {len(previous.buckets)})"
        )
    return ThreadPerf(
        count=current.count - previous.count,
        buckets=tuple(cur - prev for cur, prev in zip(current.buckets, previous.buckets)),
    )


def diff_perfs(current: PerfCounts, previous: Optional[PerfCounts] = None) -> PerfCounts:
    """
    Compute the per-thread delta between two cumulative snapshots.

    Args:
        current: The newer snapshot
        previous: The older snapshot, or None to diff against a zero baseline

    Returns:
        A PerfCounts holding ``current - previous`` for every tick count and
        bucket. With no ``previous`` the current snapshot is returned as is.

    Raises:
        ValueError: If the two snapshots have histograms of different sizes
    """
    if previous is None:
        return current
    return PerfCounts(**{
        name: _diff_thread(perf, previous.thread(name))
        for name, perf in current.threads()
    })


def did_perf_reset(current: PerfCounts, previous: PerfCounts) -> bool:
    """
    Check whether any counter went backwards between two snapshots.

    Returns:
        True if, for any thread, the tick count or any bucket of ``current``
        is strictly lower than in ``previous``.
    """
    for name, cur in current.threads():
        prev = previous.thread(name)
        if cur.count < prev.count:
            return True
        if any(c < p for c, p in zip(cur.buckets, prev.buckets)):
            return True
    return False
