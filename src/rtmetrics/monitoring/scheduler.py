"""
Fixed-cadence collection loop.
"""

import asyncio
import logging
from typing import Optional

from ..validation import AsyncErrorHandler, AsyncErrorType, ErrorSeverity
from .collector import SvRuntimeCollector

logger = logging.getLogger(__name__)


class CollectionScheduler:
    """
    Calls ``SvRuntimeCollector.collect_stats`` once per interval until the
    shutdown event is set.

    A failing tick is logged through the error handler and the loop carries
    on with the next one. Ticks never overlap: the next wait only starts
    once the previous tick, including its save, has finished.
    """

    def __init__(
        self,
        collector: SvRuntimeCollector,
        interval_seconds: float,
        shutdown_event: asyncio.Event,
        error_handler: Optional[AsyncErrorHandler] = None,
    ):
        self.collector = collector
        self.interval_seconds = interval_seconds
        self._shutdown_event = shutdown_event
        self.error_handler = error_handler or AsyncErrorHandler(logger)
        self.ticks = 0

    async def run_once(self) -> None:
        """Run a single tick, logging instead of raising on failure."""
        self.ticks += 1
        async with self.error_handler.error_context(
            component="scheduler",
            operation="collect_stats",
            error_type=AsyncErrorType.COLLECTION_ERROR,
            severity=ErrorSeverity.WARNING,
            reraise=False,
        ):
            await self.collector.collect_stats()

    async def run(self) -> None:
        logger.debug(f"Collection loop started, interval {self.interval_seconds}s")
        try:
            while not self._shutdown_event.is_set():
                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.interval_seconds)
                    break
                except asyncio.TimeoutError:
                    await self.run_once()
        finally:
            logger.debug(f"Collection loop exiting after {self.ticks} ticks")
