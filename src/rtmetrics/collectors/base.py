"""
Abstract base classes for the fetchers used by the collector.

A fetch is one asynchronous read from the supervised server: its raw
performance counters (by network endpoint) or its memory usage (by PID).
Fetchers raise ``CollectionError`` when they cannot produce a value; the
collector decides how each failure degrades the tick.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..models.perf import PerfBoundaries, PerfCounts


@dataclass(frozen=True)
class RawPerfData:
    """
    One raw performance reading.

    Attributes:
        boundaries: Histogram bucket edges, shared by all threads.
        perf: Cumulative per-thread tick counts and bucket counts.
    """

    boundaries: PerfBoundaries
    perf: PerfCounts


class AbstractPerfFetcher(ABC):
    """Reads the cumulative tick-time histograms of the server."""

    @abstractmethod
    async def fetch_raw_perf(self, endpoint: str) -> RawPerfData:
        """
        Fetch the current counters.

        Args:
            endpoint: ``host:port`` of the server

        Raises:
            CollectionError: If the counters could not be read or parsed
        """
        pass


class AbstractMemoryFetcher(ABC):
    """Reads the memory usage of the server process."""

    @abstractmethod
    async def fetch_memory(self, pid: int) -> float:
        """
        Fetch the resident memory of a process.

        Args:
            pid: Process ID of the server

        Returns:
            Resident memory in MiB

        Raises:
            CollectionError: If the process could not be inspected
        """
        pass
