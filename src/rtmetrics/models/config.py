"""
Configuration data models.

This module contains the configuration data structures for collection,
persistence, log compaction, summaries and the idle-shutdown monitor.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class StorageConfig:
    """
    Configuration for the persisted stats state, loaded from `[storage]`.

    Attributes:
        data_dir: Directory holding the state file (created on first save).
        file_name: Name of the JSON state file inside ``data_dir``.
        save_throttle_seconds: Minimum interval between throttled saves
            triggered by boot/close events. Data points bypass the throttle.
    """

    data_dir: Path = Path("data")
    file_name: str = "stats_svRuntime.json"
    save_throttle_seconds: float = 15.0

    @property
    def state_file(self) -> Path:
        return self.data_dir / self.file_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_dir": str(self.data_dir),
            "file_name": self.file_name,
            "save_throttle_seconds": self.save_throttle_seconds,
        }


@dataclass
class CollectionConfig:
    """
    Settings for the performance collection loop, loaded from `[collection]`.
    """

    # Seconds between two collection ticks.
    interval_seconds: float = 60.0
    # The server must have been up at least this long before counters are read.
    min_uptime_seconds: float = 30.0
    # Snapshots where any thread has fewer ticks than this are discarded.
    min_ticks: int = 600
    # Minimum seconds between two persisted data points.
    initial_resolution_seconds: float = 300.0
    # Timeout applied to each HTTP fetch.
    fetch_timeout_seconds: float = 10.0
    # Optional "host:port" read instead of the supervised server's endpoint.
    # When set, it is also the authoritative source of the player count.
    ext_stats_host: Optional[str] = None


@dataclass
class SummaryConfig:
    """
    Settings for the windowed performance summary, loaded from `[summary]`.
    """

    window_hours: float = 6.0
    min_snapshots: int = 36


@dataclass
class OptimizerConfig:
    """
    Settings for stats log compaction, loaded from `[optimizer]`.
    """

    # Entries younger than this are never merged.
    full_resolution_hours: float = 12.0
    # Data points older than this are dropped.
    retention_days: float = 30.0


@dataclass
class IdleConfig:
    """
    Settings for the idle-shutdown monitor, loaded from `[idle]`.
    """

    enabled: bool = True
    interval_seconds: float = 60.0
    # Grace period once the host is fully configured.
    max_idle_minutes: float = 10.0
    # Grace period while the host is still being set up.
    max_idle_minutes_setup: float = 20.0


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    collection: CollectionConfig = field(default_factory=CollectionConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    idle: IdleConfig = field(default_factory=IdleConfig)
