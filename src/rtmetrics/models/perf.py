"""
Performance counter data models.

A ``PerfCounts`` holds, for each of the three monitored server threads, a tick
count and a histogram of tick durations. The same type is used both for raw
cumulative snapshots (as fetched from the server) and for deltas between two
snapshots; only the meaning of the numbers differs.

Boundaries are the histogram bucket edges shared by all threads. They are
numbers, except for a final ``"+Inf"`` catch-all edge.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union

from ..validation import ValidationError, require_non_negative_int, require_number

THREAD_NAMES: Tuple[str, ...] = ("svMain", "svNetwork", "svSync")
"""Names of the monitored server threads, in wire/file key form."""

INF_BOUNDARY = "+Inf"

Boundary = Union[float, int, str]
PerfBoundaries = List[Boundary]


def is_valid_thread_name(name: Any) -> bool:
    """Check whether ``name`` is one of the monitored thread names."""
    return isinstance(name, str) and name in THREAD_NAMES


@dataclass(frozen=True)
class ThreadPerf:
    """
    Tick statistics for a single thread.

    Attributes:
        count: Number of ticks.
        buckets: Tick count per histogram bucket, one per boundary.
    """

    count: int
    buckets: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "buckets": list(self.buckets)}

    @classmethod
    def from_dict(cls, data: Any, field_name: str = "perf") -> "ThreadPerf":
        if not isinstance(data, dict):
            raise ValidationError(f"{field_name} must be an object", field_name=field_name, value=data)
        count = require_non_negative_int(data.get("count"), f"{field_name}.count")
        raw_buckets = data.get("buckets")
        if not isinstance(raw_buckets, list):
            raise ValidationError(
                f"{field_name}.buckets must be a list", field_name=f"{field_name}.buckets", value=raw_buckets
            )
        buckets = tuple(
            require_non_negative_int(value, f"{field_name}.buckets[{i}]")
            for i, value in enumerate(raw_buckets)
        )
        return cls(count=count, buckets=buckets)


@dataclass(frozen=True)
class PerfCounts:
    """Tick statistics for all three monitored threads."""

    svMain: ThreadPerf
    svNetwork: ThreadPerf
    svSync: ThreadPerf

    def thread(self, name: str) -> ThreadPerf:
        """Return the statistics of a thread by name."""
        if not is_valid_thread_name(name):
            raise KeyError(f"Unknown thread name: {name}")
        return getattr(self, name)

    def threads(self) -> List[Tuple[str, ThreadPerf]]:
        return [(name, getattr(self, name)) for name in THREAD_NAMES]

    def min_count(self) -> int:
        """Smallest tick count among the threads."""
        return min(perf.count for _, perf in self.threads())

    def to_dict(self) -> Dict[str, Any]:
        return {name: perf.to_dict() for name, perf in self.threads()}

    @classmethod
    def from_dict(cls, data: Any, field_name: str = "perf") -> "PerfCounts":
        if not isinstance(data, dict):
            raise ValidationError(f"{field_name} must be an object", field_name=field_name, value=data)
        return cls(**{
            name: ThreadPerf.from_dict(data.get(name), f"{field_name}.{name}")
            for name in THREAD_NAMES
        })


def boundaries_from_json(data: Any, field_name: str = "lastPerfBoundaries") -> PerfBoundaries:
    """
    Validate a list of boundaries loaded from JSON.

    Every element must be a finite number, except that the last one may be
    the ``"+Inf"`` literal.
    """
    if not isinstance(data, list):
        raise ValidationError(f"{field_name} must be a list", field_name=field_name, value=data)
    boundaries: PerfBoundaries = []
    for i, value in enumerate(data):
        if value == INF_BOUNDARY and i == len(data) - 1:
            boundaries.append(INF_BOUNDARY)
        else:
            boundaries.append(require_number(value, f"{field_name}[{i}]"))
    return boundaries
