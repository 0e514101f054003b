"""
rtmetrics: runtime telemetry collector for a game-server host.

The package samples a supervised server's tick-time histograms and memory
use, keeps a compacted history on disk, serves chart and summary views to a
dashboard and shuts an idle server down.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- collectors: Counter, memory and player count fetchers
- stats: Diffing, the stats log, compaction and queries
- storage: The versioned state file and save throttling
- host: Interfaces of the host collaborators and standalone adapters
- monitoring: The collector and its control loops
- cli: Command-line interface

Usage:
    From command line:
        rtmetrics run --pid 1234 --endpoint 127.0.0.1:30120

    Programmatically:
        from rtmetrics import RuntimeMetricsService, get_config
        service = RuntimeMetricsService(get_config(), process, host)
        async with service:
            await service.wait()
"""

__version__ = "0.1.0"

from .config import clear_config_cache, get_config, set_config_path
from .events import EventBus, RefreshEvent
from .models import (
    AppConfig,
    BootEntry,
    CloseEntry,
    ConfigState,
    DataEntry,
    FxMonitorHealth,
    MonitorStatus,
    PerfCounts,
    ThreadPerf,
)
from .monitoring import (
    CollectionScheduler,
    IdleMonitor,
    RuntimeMetricsService,
    SvRuntimeCollector,
)

__all__ = [
    "__version__",
    "clear_config_cache",
    "get_config",
    "set_config_path",
    "EventBus",
    "RefreshEvent",
    "AppConfig",
    "BootEntry",
    "CloseEntry",
    "ConfigState",
    "DataEntry",
    "FxMonitorHealth",
    "MonitorStatus",
    "PerfCounts",
    "ThreadPerf",
    "CollectionScheduler",
    "IdleMonitor",
    "RuntimeMetricsService",
    "SvRuntimeCollector",
]
