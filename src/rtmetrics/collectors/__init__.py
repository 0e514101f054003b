"""
Fetchers for the supervised server's counters, memory and player count.
"""

from .base import AbstractMemoryFetcher, AbstractPerfFetcher, RawPerfData
from .http_client import HttpFetcher
from .perf_http import HttpPerfFetcher, parse_raw_perf
from .players import HttpPlayerCountFetcher, HttpPlayerSource
from .process_memory import PsutilMemoryFetcher, read_rss_mib

__all__ = [
    "AbstractMemoryFetcher",
    "AbstractPerfFetcher",
    "RawPerfData",
    "HttpFetcher",
    "HttpPerfFetcher",
    "parse_raw_perf",
    "HttpPlayerCountFetcher",
    "HttpPlayerSource",
    "PsutilMemoryFetcher",
    "read_rss_mib",
]
