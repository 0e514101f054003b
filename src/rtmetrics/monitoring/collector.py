"""
Runtime metrics collector for the supervised game server.

``SvRuntimeCollector`` owns all collector state: the histogram boundaries,
the raw and saved counter baselines, the last memory readings and the stats
log. It is created once, loaded from disk with ``load_stats_history()`` and
then driven by two kinds of callers:

- the collection scheduler, which calls ``collect_stats()`` once per period;
- the server lifecycle, which reports boots, closes and host runtime memory.

Everything runs on one event loop. State file writes are serialized by a
lock, so a throttled save that is already writing cannot land after a newer
priority save.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

from ..collectors.base import AbstractMemoryFetcher, AbstractPerfFetcher, RawPerfData
from ..collectors.players import HttpPlayerCountFetcher
from ..events import EventBus
from ..host.interfaces import PlayerSource, SupervisedProcess
from ..models.config import AppConfig
from ..models.log import DataEntry
from ..models.perf import PerfBoundaries, PerfCounts
from ..models.status import FxMonitorHealth
from ..stats.log_optimizer import optimize_stats_log
from ..stats.perf_diff import did_perf_reset, diff_perfs
from ..stats.queries import (
    ChartResult,
    PerfSummary,
    RecentStats,
    build_chart_data,
    build_perf_summary,
    build_recent_stats,
)
from ..stats.stats_log import StatsLog
from ..storage.persistence import StatsPersistence, state_to_dict
from ..storage.throttle import ThrottledCall
from ..validation import CollectionError, ValidationError, require_non_negative_int

logger = logging.getLogger(__name__)


class SvRuntimeCollector:
    """
    Collects, stores and serves the server's runtime statistics.

    Attributes:
        stats_log: The in-memory history.
        last_perf_boundaries: Boundaries of every data point in the log.
        last_raw_perf: The previous raw snapshot, baseline of the live delta.
        last_diff_perf: Live delta shown on the dashboard.
        last_raw_perf_saved: Raw snapshot behind the last persisted data point.
        last_raw_perf_saved_ts: Epoch ms of ``last_raw_perf_saved``.
        last_fxs_memory: Last server memory reading in MiB.
        last_node_memory: Last host runtime memory report (``used``/``limit``).
    """

    def __init__(
        self,
        config: AppConfig,
        process: SupervisedProcess,
        perf_fetcher: AbstractPerfFetcher,
        memory_fetcher: AbstractMemoryFetcher,
        persistence: StatsPersistence,
        event_bus: Optional[EventBus] = None,
        player_source: Optional[PlayerSource] = None,
        player_count_fetcher: Optional[HttpPlayerCountFetcher] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            config: Application configuration
            process: The supervised server
            perf_fetcher: Reads raw counters by endpoint
            memory_fetcher: Reads server memory by PID
            persistence: State file access
            event_bus: Receives a refresh event on every state change
            player_source: Local online player count
            player_count_fetcher: Used instead of ``player_source`` when an
                external stats host is configured
            clock: Returns the current time in epoch seconds
        """
        self.config = config
        self.process = process
        self.perf_fetcher = perf_fetcher
        self.memory_fetcher = memory_fetcher
        self.persistence = persistence
        self.event_bus = event_bus or EventBus()
        self.player_source = player_source
        self.player_count_fetcher = player_count_fetcher or HttpPlayerCountFetcher(
            timeout_seconds=config.collection.fetch_timeout_seconds
        )
        self.clock = clock

        self.stats_log = StatsLog()
        self.last_perf_boundaries: Optional[PerfBoundaries] = None
        self.last_raw_perf: Optional[PerfCounts] = None
        self.last_diff_perf: Optional[PerfCounts] = None
        self.last_raw_perf_saved: Optional[PerfCounts] = None
        self.last_raw_perf_saved_ts: Optional[int] = None
        self.last_fxs_memory: Optional[float] = None
        self.last_node_memory: Optional[Dict[str, int]] = None
        self.last_player_count = 0

        self._save_lock = asyncio.Lock()
        self._save_throttle = ThrottledCall(
            config.storage.save_throttle_seconds,
            self.save_stats_history,
            name="save_stats_history",
        )

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    # --- State resets ---

    def reset_perf_state(self) -> None:
        """Forget every counter baseline; boundaries are kept."""
        self.last_raw_perf = None
        self.last_diff_perf = None
        self.last_raw_perf_saved = None
        self.last_raw_perf_saved_ts = None

    def reset_memory_state(self) -> None:
        self.last_fxs_memory = None
        self.last_node_memory = None

    def _push_refresh(self) -> None:
        self.event_bus.push_refresh()

    # --- Persistence ---

    async def load_stats_history(self) -> None:
        """
        Load the state file and adopt its boundaries and log.

        A missing or invalid file leaves the collector empty.
        """
        state = await self.persistence.load()
        self.last_perf_boundaries = state.boundaries
        self.stats_log.replace(
            optimize_stats_log(state.entries, self.now_ms(), self.config.optimizer)
        )
        self.reset_perf_state()

    async def save_stats_history(self) -> bool:
        """
        Compact the log and write it to the state file.

        Writes run one at a time. The document is built once the previous
        write has finished, so every write carries the newest log.

        Returns:
            True if the file was written
        """
        async with self._save_lock:
            self.stats_log.replace(
                optimize_stats_log(self.stats_log.entries(), self.now_ms(), self.config.optimizer)
            )
            document = state_to_dict(self.last_perf_boundaries, self.stats_log.entries())
            return await self.persistence.write(document)

    def queue_save_stats_history(self) -> None:
        """Request a throttled save."""
        self._save_throttle.request()

    async def flush(self) -> None:
        """Write any pending throttled save now."""
        await self._save_throttle.flush()

    # --- Lifecycle events ---

    def log_server_boot(self, duration: float) -> None:
        """
        Record that the server finished booting.

        Args:
            duration: Boot time in seconds
        """
        self.reset_perf_state()
        self.reset_memory_state()
        self._push_refresh()
        self.stats_log.append_boot(self.now_ms(), duration)
        self.queue_save_stats_history()

    def log_server_close(self, reason: str) -> None:
        """Record that the server was stopped."""
        self.reset_perf_state()
        self.reset_memory_state()
        self._push_refresh()
        if self.stats_log.append_close(self.now_ms(), reason):
            self.queue_save_stats_history()

    def log_server_node_memory(self, payload: Any) -> bool:
        """
        Store a host runtime memory report.

        Args:
            payload: ``{"used": int, "limit": int}`` in MiB

        Returns:
            True if the payload was valid and stored
        """
        try:
            if not isinstance(payload, dict):
                raise ValidationError("payload must be an object", field_name="payload", value=payload)
            used = require_non_negative_int(payload.get("used"), "used")
            limit = require_non_negative_int(payload.get("limit"), "limit")
            if used > limit:
                raise ValidationError(f"used ({used}) exceeds limit ({limit})", field_name="used", value=used)
        except ValidationError as e:
            logger.warning(f"Invalid node memory payload: {e}")
            return False

        self.last_node_memory = {"used": used, "limit": limit}
        self._push_refresh()
        return True

    # --- Collection ---

    def _resolve_endpoint(self) -> str:
        endpoint = self.config.collection.ext_stats_host or self.process.net_endpoint
        if not endpoint:
            raise CollectionError(f"Invalid net endpoint: {endpoint!r}")
        return endpoint

    async def _fetch_memory(self) -> float:
        pid = self.process.pid
        if pid is None:
            raise CollectionError("Server PID is unknown")
        return await self.memory_fetcher.fetch_memory(pid)

    async def _resolve_player_count(self, endpoint: str) -> int:
        if self.config.collection.ext_stats_host:
            try:
                return await self.player_count_fetcher.fetch_player_count(endpoint)
            except Exception as e:
                logger.debug(f"External player count unavailable, using local count: {e}")

        if self.player_source is not None:
            try:
                self.last_player_count = await self.player_source.get_online_count()
            except Exception as e:
                logger.debug(f"Player count unavailable, using last known value: {e}")
        return self.last_player_count

    async def collect_stats(self) -> None:
        """
        Run one collection tick.

        Raises:
            CollectionError: If the endpoint is unknown or the counters could
                not be fetched
        """
        status = self.process.status
        if status.health == FxMonitorHealth.OFFLINE:
            return
        if status.uptime_seconds < self.config.collection.min_uptime_seconds:
            return
        if not self.process.is_alive:
            return

        endpoint = self._resolve_endpoint()
        started = time.perf_counter()
        perf_result, memory_result = await asyncio.gather(
            self.perf_fetcher.fetch_raw_perf(endpoint),
            self._fetch_memory(),
            return_exceptions=True,
        )
        logger.debug(f"Fetched counters and memory in {(time.perf_counter() - started) * 1000:.1f} ms")

        if isinstance(memory_result, BaseException):
            logger.debug(f"Server memory unavailable: {memory_result}")
            self.last_fxs_memory = None
        else:
            self.last_fxs_memory = memory_result
        if isinstance(perf_result, BaseException):
            raise perf_result

        raw: RawPerfData = perf_result
        perf = raw.perf

        min_ticks = self.config.collection.min_ticks
        if perf.min_count() < min_ticks:
            logger.warning("Not enough ticks to log. Skipping this collection.")
            return

        if self.last_perf_boundaries is None:
            logger.debug("First perf collection.")
            self.last_perf_boundaries = list(raw.boundaries)
            self.reset_perf_state()
        elif list(raw.boundaries) != list(self.last_perf_boundaries):
            logger.warning("Performance boundaries changed. Resetting history.")
            self.stats_log.clear()
            self.last_perf_boundaries = list(raw.boundaries)
            self.reset_perf_state()

        if self.last_raw_perf is not None and did_perf_reset(perf, self.last_raw_perf):
            logger.warning("Performance counter reset. Resetting last raw and saved perf data.")
            self.reset_perf_state()
        elif self.last_raw_perf_saved is not None and did_perf_reset(perf, self.last_raw_perf_saved):
            logger.warning("Performance counter reset. Resetting last saved perf data.")
            self.last_raw_perf_saved = None
            self.last_raw_perf_saved_ts = None

        self.last_diff_perf = diff_perfs(perf, self.last_raw_perf)
        self.last_raw_perf = perf
        self._push_refresh()

        now = self.now_ms()
        resolution_ms = self.config.collection.initial_resolution_seconds * 1000
        if self.last_raw_perf_saved is None:
            perf_to_save = self.last_diff_perf
        elif now - self.last_raw_perf_saved_ts >= resolution_ms:
            perf_to_save = diff_perfs(perf, self.last_raw_perf_saved)
        else:
            return

        players = await self._resolve_player_count(endpoint)

        self.last_raw_perf_saved = perf
        self.last_raw_perf_saved_ts = now
        self.stats_log.append_data(DataEntry(
            ts=now,
            players=players,
            fxs_memory=self.last_fxs_memory,
            node_memory=self.last_node_memory["used"] if self.last_node_memory else None,
            perf=perf_to_save,
        ))
        logger.debug(f"Collected performance snapshot #{len(self.stats_log)}")

        self._save_throttle.cancel()
        await self.save_stats_history()

    # --- Queries ---

    def get_recent_stats(self) -> RecentStats:
        return build_recent_stats(
            self.last_fxs_memory,
            self.last_node_memory,
            self.last_perf_boundaries,
            self.last_diff_perf,
        )

    def get_chart_data(self, thread_name: str) -> ChartResult:
        return build_chart_data(thread_name, self.stats_log.entries(), self.last_perf_boundaries)

    def get_server_perf_summary(self) -> Optional[PerfSummary]:
        """
        Summarize the main thread's performance over the recent window.

        Returns:
            None when there is not enough recent data
        """
        return build_perf_summary(
            self.stats_log.entries(),
            self.now_ms(),
            self.config.collection.min_ticks,
            self.config.summary,
        )
