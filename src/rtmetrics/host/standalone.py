"""
Standalone host adapters.

These adapters let the collector watch a server process that something else
started, identified by PID. Health is derived from the process alone: a
running process is ONLINE, anything else is OFFLINE.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

import psutil

from ..models.status import ConfigState, FxMonitorHealth, MonitorStatus
from .interfaces import HostControl, SupervisedProcess

logger = logging.getLogger(__name__)


class StandaloneProcess(SupervisedProcess):
    """SupervisedProcess backed by an existing OS process."""

    def __init__(self, pid: int, endpoint: str, kill_timeout: float = 10.0):
        self._pid = pid
        self._endpoint = endpoint
        self.kill_timeout = kill_timeout
        self._process: Optional[psutil.Process]
        try:
            self._process = psutil.Process(pid)
        except psutil.NoSuchProcess:
            logger.warning(f"Process {pid} does not exist")
            self._process = None

    @property
    def is_alive(self) -> bool:
        if self._process is None:
            return False
        try:
            return self._process.is_running() and self._process.status() != psutil.STATUS_ZOMBIE
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    @property
    def status(self) -> MonitorStatus:
        if not self.is_alive:
            return MonitorStatus(health=FxMonitorHealth.OFFLINE, uptime_seconds=0.0)
        try:
            uptime = max(0.0, time.time() - self._process.create_time())
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return MonitorStatus(health=FxMonitorHealth.OFFLINE, uptime_seconds=0.0)
        return MonitorStatus(health=FxMonitorHealth.ONLINE, uptime_seconds=uptime)

    @property
    def pid(self) -> Optional[int]:
        return self._pid if self.is_alive else None

    @property
    def net_endpoint(self) -> Optional[str]:
        return self._endpoint

    @property
    def is_idle(self) -> bool:
        return not self.is_alive

    def _terminate(self) -> None:
        proc = self._process
        if proc is None:
            return
        try:
            proc.terminate()
            proc.wait(timeout=self.kill_timeout)
        except psutil.TimeoutExpired:
            logger.warning(f"Process {self._pid} did not exit after {self.kill_timeout}s, killing it")
            proc.kill()
        except psutil.NoSuchProcess:
            pass

    async def kill_server(self, reason: str) -> None:
        logger.info(f"Stopping server process {self._pid}: {reason}")
        await asyncio.get_running_loop().run_in_executor(None, self._terminate)


class StandaloneHostControl(HostControl):
    """
    HostControl for the command-line runner.

    The configuration state is always READY. ``quit_process`` records the
    exit code and calls ``on_quit`` so the runner can stop its loops and
    exit cleanly.
    """

    def __init__(self, on_quit: Callable[[], None], config_state: ConfigState = ConfigState.READY):
        self._on_quit = on_quit
        self._config_state = config_state
        self.exit_code: Optional[int] = None

    @property
    def config_state(self) -> ConfigState:
        return self._config_state

    def quit_process(self, code: int = 0) -> None:
        logger.info(f"Quitting with exit code {code}")
        self.exit_code = code
        self._on_quit()
