"""
Status enums reported by the host's collaborators.
"""

from dataclasses import dataclass
from enum import Enum


class FxMonitorHealth(Enum):
    """Health of the supervised server as seen by its monitor."""

    OFFLINE = "OFFLINE"
    PARTIAL = "PARTIAL"
    ONLINE = "ONLINE"


class ConfigState(Enum):
    """Configuration state of the host application."""

    UNKNOWN = "unknown"
    SETUP = "setup"
    DEPLOYER = "deployer"
    READY = "ready"


@dataclass(frozen=True)
class MonitorStatus:
    """
    Point-in-time status of the supervised server.

    Attributes:
        health: Current health as reported by the server monitor.
        uptime_seconds: Seconds since the server process was started.
    """

    health: FxMonitorHealth
    uptime_seconds: float
