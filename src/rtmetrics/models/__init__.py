"""
Data models for the runtime metrics collector.

Configuration Models:
- Collection, storage, summary, compaction and idle-monitor settings

Performance Models:
- Per-thread tick counts and duration histograms (raw snapshots and deltas)
- Histogram boundaries shared by all threads

Stats Log Models:
- Boot, close and data-point entries and their JSON conversion

Status Models:
- Health and configuration-state enums reported by host collaborators

All models are dataclasses; the perf and log models are frozen so that
entries handed to persistence cannot change afterwards.
"""

from .config import (
    AppConfig,
    CollectionConfig,
    IdleConfig,
    OptimizerConfig,
    StorageConfig,
    SummaryConfig,
)
from .log import (
    BootEntry,
    CloseEntry,
    DataEntry,
    LogEntry,
    entries_from_json,
    entry_from_dict,
    entry_to_dict,
)
from .perf import (
    INF_BOUNDARY,
    THREAD_NAMES,
    PerfBoundaries,
    PerfCounts,
    ThreadPerf,
    boundaries_from_json,
    is_valid_thread_name,
)
from .status import ConfigState, FxMonitorHealth, MonitorStatus

__all__ = [
    # Configuration
    "AppConfig",
    "CollectionConfig",
    "IdleConfig",
    "OptimizerConfig",
    "StorageConfig",
    "SummaryConfig",
    # Stats log
    "BootEntry",
    "CloseEntry",
    "DataEntry",
    "LogEntry",
    "entries_from_json",
    "entry_from_dict",
    "entry_to_dict",
    # Performance
    "INF_BOUNDARY",
    "THREAD_NAMES",
    "PerfBoundaries",
    "PerfCounts",
    "ThreadPerf",
    "boundaries_from_json",
    "is_valid_thread_name",
    # Status
    "ConfigState",
    "FxMonitorHealth",
    "MonitorStatus",
]
