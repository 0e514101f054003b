"""
Trailing-edge throttle for coroutine functions.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class ThrottledCall:
    """
    Run a coroutine function at most once per interval, on the trailing edge.

    The first ``request()`` arms a timer; further requests while it is armed
    are coalesced into the same call. Nothing runs immediately on the first
    request. ``cancel()`` disarms a pending timer, for callers that are about
    to do the work themselves.
    """

    def __init__(self, interval_seconds: float, func: Callable[[], Awaitable[None]], name: str = "throttled"):
        self.interval_seconds = interval_seconds
        self.func = func
        self.name = name
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def request(self) -> None:
        """Schedule a call unless one is already pending."""
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.interval_seconds, self._fire)

    def cancel(self) -> bool:
        """
        Drop the pending call, if any.

        Returns:
            True if a pending call was cancelled
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        logger.debug(f"Cancelled pending {self.name} call")
        return True

    def _fire(self) -> None:
        self._handle = None
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)

    async def _run(self) -> None:
        try:
            await self.func()
        except Exception as e:
            logger.error(f"Throttled {self.name} call failed: {e}", exc_info=True)

    async def flush(self) -> None:
        """Run a pending call now and wait for any call already running."""
        if self.cancel():
            await self._run()
        if self._task is not None and not self._task.done():
            await self._task
