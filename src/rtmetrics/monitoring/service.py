"""
Service wiring the collector and its two control loops together.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from ..collectors.base import AbstractMemoryFetcher, AbstractPerfFetcher
from ..collectors.perf_http import HttpPerfFetcher
from ..collectors.process_memory import PsutilMemoryFetcher
from ..events import EventBus
from ..host.interfaces import HostControl, PlayerSource, SupervisedProcess
from ..models.config import AppConfig
from ..storage.base import StateStorage
from ..storage.persistence import StatsPersistence
from ..validation import AsyncErrorHandler, ErrorSeverity, handle_error
from .collector import SvRuntimeCollector
from .idle_monitor import IdleMonitor
from .scheduler import CollectionScheduler

logger = logging.getLogger(__name__)


class RuntimeMetricsService:
    """
    Owns the collector, the collection scheduler and the idle monitor.

    ``start()`` loads the state file before either loop runs, so the first
    tick always sees the persisted history. ``stop()`` signals both loops,
    waits for them and writes any pending throttled save.
    """

    def __init__(
        self,
        config: AppConfig,
        process: SupervisedProcess,
        host: HostControl,
        perf_fetcher: Optional[AbstractPerfFetcher] = None,
        memory_fetcher: Optional[AbstractMemoryFetcher] = None,
        player_source: Optional[PlayerSource] = None,
        event_bus: Optional[EventBus] = None,
        storage: Optional[StateStorage] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self._shutdown_event = asyncio.Event()
        self.error_handler = AsyncErrorHandler(logger)
        self.tasks: List[asyncio.Task] = []
        self.is_running = False

        self.collector = SvRuntimeCollector(
            config=config,
            process=process,
            perf_fetcher=perf_fetcher or HttpPerfFetcher(config.collection.fetch_timeout_seconds),
            memory_fetcher=memory_fetcher or PsutilMemoryFetcher(),
            persistence=StatsPersistence(config.storage, storage),
            event_bus=event_bus,
            player_source=player_source,
            clock=clock,
        )
        self.scheduler = CollectionScheduler(
            self.collector,
            config.collection.interval_seconds,
            self._shutdown_event,
            self.error_handler,
        )
        self.idle_monitor = IdleMonitor(
            self.collector,
            process,
            host,
            config.idle,
            self._shutdown_event,
            player_source=player_source,
            error_handler=self.error_handler,
            clock=clock,
        )

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_event.is_set()

    def request_shutdown(self) -> None:
        """Ask both loops to exit after their current tick."""
        self._shutdown_event.set()

    async def start(self) -> None:
        if self.is_running:
            logger.warning("Service is already running")
            return

        await self.collector.load_stats_history()
        self._shutdown_event.clear()
        self.tasks = [
            asyncio.create_task(self.scheduler.run(), name="collection-scheduler"),
            asyncio.create_task(self.idle_monitor.run(), name="idle-monitor"),
        ]
        self.is_running = True
        logger.info(
            f"Runtime metrics started: collecting every {self.config.collection.interval_seconds}s, "
            f"{len(self.collector.stats_log)} entries in history"
        )

    async def wait(self) -> None:
        await self._shutdown_event.wait()

    async def stop(self) -> None:
        if not self.is_running:
            return
        self.request_shutdown()
        try:
            await asyncio.gather(*self.tasks, return_exceptions=True)
            await self.collector.flush()
        except Exception as e:
            handle_error(
                error=e,
                context="stopping runtime metrics service",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger
            )
        finally:
            self.tasks.clear()
            self.is_running = False

        summary = await self.error_handler.get_error_summary()
        if summary["total_errors"]:
            logger.info(f"Stopped with {summary['total_errors']} handled errors: {summary['error_counts']}")
        else:
            logger.info("Runtime metrics stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
