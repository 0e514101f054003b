"""
Interfaces of the host collaborators the collector depends on.

The collector does not supervise the game server itself. It reads the
server's status from whatever does, asks it for the online player count,
and, on idle timeout, asks it to kill the server and the host to exit.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.status import ConfigState, MonitorStatus


class SupervisedProcess(ABC):
    """The supervised game server, as seen by its lifecycle manager."""

    @property
    @abstractmethod
    def status(self) -> MonitorStatus:
        """Current health and uptime of the server."""
        pass

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        pass

    @property
    @abstractmethod
    def pid(self) -> Optional[int]:
        pass

    @property
    @abstractmethod
    def net_endpoint(self) -> Optional[str]:
        """``host:port`` the server listens on, None if unknown."""
        pass

    @property
    @abstractmethod
    def is_idle(self) -> bool:
        """True when no server is running under the supervisor."""
        pass

    @abstractmethod
    async def kill_server(self, reason: str) -> None:
        """
        Stop the server.

        Args:
            reason: Human-readable reason, recorded by the supervisor
        """
        pass


class PlayerSource(ABC):
    """Source of the online player count."""

    @abstractmethod
    async def get_online_count(self) -> int:
        """
        Return the number of connected players.

        Raises:
            Exception: Implementations may raise on transient failures;
                callers fall back to the last known count.
        """
        pass


class HostControl(ABC):
    """The host application running the collector."""

    @property
    @abstractmethod
    def config_state(self) -> ConfigState:
        pass

    @abstractmethod
    def quit_process(self, code: int = 0) -> None:
        """Terminate the host process with the given exit code."""
        pass
