"""
Collection and idle-shutdown control loops.
"""

from .collector import SvRuntimeCollector
from .idle_monitor import IdleMonitor
from .scheduler import CollectionScheduler
from .service import RuntimeMetricsService

__all__ = [
    "SvRuntimeCollector",
    "IdleMonitor",
    "CollectionScheduler",
    "RuntimeMetricsService",
]
