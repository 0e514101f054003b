"""
Idle-shutdown loop.

When the server has had no players for long enough, the monitor logs a
close entry, stops the server and asks the host to exit. The grace period
is longer while the host is still being set up than once it is ready.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from ..host.interfaces import HostControl, PlayerSource, SupervisedProcess
from ..models.config import IdleConfig
from ..models.status import ConfigState, FxMonitorHealth
from ..validation import AsyncErrorHandler, AsyncErrorType, ErrorSeverity, handle_error
from .collector import SvRuntimeCollector

logger = logging.getLogger(__name__)


class IdleMonitor:
    """
    Tracks how long the server has been without players.

    Attributes:
        idle_since: Epoch seconds when the idle period started, None when
            the server is not considered idle.
        last_config_state: Host configuration state seen on the previous tick.
    """

    def __init__(
        self,
        collector: SvRuntimeCollector,
        process: SupervisedProcess,
        host: HostControl,
        config: IdleConfig,
        shutdown_event: asyncio.Event,
        player_source: Optional[PlayerSource] = None,
        error_handler: Optional[AsyncErrorHandler] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.collector = collector
        self.process = process
        self.host = host
        self.config = config
        self.player_source = player_source
        self._shutdown_event = shutdown_event
        self.error_handler = error_handler or AsyncErrorHandler(logger)
        self.clock = clock

        self.idle_since: Optional[float] = None
        self.last_config_state: Optional[ConfigState] = None
        self.shutdown_issued = False

    def timeout_minutes(self, config_state: ConfigState) -> float:
        if config_state == ConfigState.READY:
            return self.config.max_idle_minutes
        return self.config.max_idle_minutes_setup

    async def _online_player_count(self) -> int:
        if self.player_source is None:
            return 0
        return await self.player_source.get_online_count()

    async def check_idle(self) -> None:
        """Run one idle check."""
        if self.shutdown_issued:
            return

        config_state = self.host.config_state
        if config_state != self.last_config_state:
            self.last_config_state = config_state
            self.idle_since = None
            return

        health = self.process.status.health
        if health == FxMonitorHealth.PARTIAL:
            # Server is coming up.
            self.idle_since = None
            return

        if health == FxMonitorHealth.ONLINE and await self._online_player_count() > 0:
            self.idle_since = None
            return

        now = self.clock()
        if self.idle_since is None:
            self.idle_since = now
            return

        timeout_minutes = self.timeout_minutes(config_state)
        if now - self.idle_since >= timeout_minutes * 60:
            await self._shutdown(timeout_minutes)

    async def _shutdown(self, timeout_minutes: float) -> None:
        self.shutdown_issued = True
        self.idle_since = None
        logger.warning(f"No players for {timeout_minutes:g} minutes, shutting down")
        self.collector.log_server_close(
            f"No players for {timeout_minutes:g}m, killing server and hosted server instance"
        )

        try:
            if not self.process.is_idle:
                await self.process.kill_server("idle timeout")
            await self.collector.flush()
        except Exception as e:
            handle_error(e, "idle shutdown", severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
        self.host.quit_process(0)

    async def run_once(self) -> None:
        async with self.error_handler.error_context(
            component="idle_monitor",
            operation="check_idle",
            error_type=AsyncErrorType.IDLE_MONITOR_ERROR,
            severity=ErrorSeverity.WARNING,
            reraise=False,
        ):
            await self.check_idle()

    async def run(self) -> None:
        if not self.config.enabled:
            logger.info("Idle shutdown is disabled")
            return

        logger.debug(f"Idle monitor started, interval {self.config.interval_seconds}s")
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.config.interval_seconds)
                break
            except asyncio.TimeoutError:
                await self.run_once()
        logger.debug("Idle monitor exiting")
