"""
Pytest configuration and shared fixtures for the rtmetrics test suite.

This module provides common fixtures, fake collaborators and test utilities
for all test modules in the rtmetrics project.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional, Sequence, Union

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rtmetrics.collectors.base import AbstractMemoryFetcher, AbstractPerfFetcher, RawPerfData  # noqa: E402
from rtmetrics.events import EventBus  # noqa: E402
from rtmetrics.host.interfaces import HostControl, PlayerSource, SupervisedProcess  # noqa: E402
from rtmetrics.models import (  # noqa: E402
    AppConfig,
    CollectionConfig,
    ConfigState,
    DataEntry,
    FxMonitorHealth,
    IdleConfig,
    MonitorStatus,
    PerfCounts,
    StorageConfig,
    ThreadPerf,
)
from rtmetrics.monitoring.collector import SvRuntimeCollector  # noqa: E402
from rtmetrics.storage.persistence import StatsPersistence  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "e2e: mark test as an end-to-end test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


BOUNDARIES = [0.01, 0.05, 0.1, "+Inf"]
START_TS = 1_700_000_000.0


# ============================================================================
# Fake collaborators
# ============================================================================


class FakeClock:
    """Settable clock returning epoch seconds."""

    def __init__(self, now: float = START_TS):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProcess(SupervisedProcess):
    def __init__(self):
        self.health = FxMonitorHealth.ONLINE
        self.uptime_seconds = 3600.0
        self.alive = True
        self.pid_value: Optional[int] = 4242
        self.endpoint: Optional[str] = "127.0.0.1:30120"
        self.idle = False
        self.kill_calls: List[str] = []

    @property
    def status(self) -> MonitorStatus:
        return MonitorStatus(health=self.health, uptime_seconds=self.uptime_seconds)

    @property
    def is_alive(self) -> bool:
        return self.alive

    @property
    def pid(self) -> Optional[int]:
        return self.pid_value

    @property
    def net_endpoint(self) -> Optional[str]:
        return self.endpoint

    @property
    def is_idle(self) -> bool:
        return self.idle

    async def kill_server(self, reason: str) -> None:
        self.kill_calls.append(reason)


class FakeHost(HostControl):
    def __init__(self, config_state: ConfigState = ConfigState.READY):
        self.state = config_state
        self.quit_calls: List[int] = []

    @property
    def config_state(self) -> ConfigState:
        return self.state

    def quit_process(self, code: int = 0) -> None:
        self.quit_calls.append(code)


class FakePlayerSource(PlayerSource):
    def __init__(self, count: int = 0):
        self.count = count
        self.error: Optional[Exception] = None

    async def get_online_count(self) -> int:
        if self.error is not None:
            raise self.error
        return self.count


class FakePerfFetcher(AbstractPerfFetcher):
    """Returns queued readings (or raises queued exceptions) in order."""

    def __init__(self):
        self.results: List[Union[RawPerfData, Exception]] = []
        self.endpoints: List[str] = []

    def push(self, *results: Union[RawPerfData, Exception]) -> None:
        self.results.extend(results)

    async def fetch_raw_perf(self, endpoint: str) -> RawPerfData:
        self.endpoints.append(endpoint)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeMemoryFetcher(AbstractMemoryFetcher):
    def __init__(self, value: float = 512.5):
        self.value = value
        self.error: Optional[Exception] = None

    async def fetch_memory(self, pid: int) -> float:
        if self.error is not None:
            raise self.error
        return self.value


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for building perf data and log entries."""

    @staticmethod
    def make_thread(count: int, buckets: Optional[Sequence[int]] = None) -> ThreadPerf:
        if buckets is None:
            buckets = (count, 0, 0, 0)
        return ThreadPerf(count=count, buckets=tuple(buckets))

    @staticmethod
    def make_perf(count: int = 1000, buckets: Optional[Sequence[int]] = None, **threads) -> PerfCounts:
        """Build a PerfCounts with the same values on every thread, unless overridden."""
        default = TestUtils.make_thread(count, buckets)
        return PerfCounts(
            svMain=threads.get("svMain", default),
            svNetwork=threads.get("svNetwork", default),
            svSync=threads.get("svSync", default),
        )

    @staticmethod
    def make_raw(count: int = 1000, buckets: Optional[Sequence[int]] = None, boundaries=None) -> RawPerfData:
        return RawPerfData(
            boundaries=list(boundaries if boundaries is not None else BOUNDARIES),
            perf=TestUtils.make_perf(count, buckets),
        )

    @staticmethod
    def make_data_entry(
        ts: int,
        players: int = 0,
        fxs_memory: Optional[float] = None,
        node_memory: Optional[float] = None,
        count: int = 1000,
        buckets: Optional[Sequence[int]] = None,
    ) -> DataEntry:
        return DataEntry(
            ts=ts,
            players=players,
            fxs_memory=fxs_memory,
            node_memory=node_memory,
            perf=TestUtils.make_perf(count, buckets),
        )


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def app_config(temp_dir):
    """Default configuration with the state file inside the temp directory."""
    return AppConfig(
        collection=CollectionConfig(),
        storage=StorageConfig(data_dir=temp_dir / "data"),
        idle=IdleConfig(),
    )


@pytest.fixture
def collector_env(app_config):
    """
    A collector wired to fake collaborators.

    Returns a namespace with the collector, its fakes, the clock and the
    list of refresh events emitted so far.
    """
    clock = FakeClock()
    process = FakeProcess()
    perf_fetcher = FakePerfFetcher()
    memory_fetcher = FakeMemoryFetcher()
    players = FakePlayerSource(count=5)
    event_bus = EventBus()
    events = []
    event_bus.subscribe(events.append)

    collector = SvRuntimeCollector(
        config=app_config,
        process=process,
        perf_fetcher=perf_fetcher,
        memory_fetcher=memory_fetcher,
        persistence=StatsPersistence(app_config.storage),
        event_bus=event_bus,
        player_source=players,
        clock=clock,
    )
    return SimpleNamespace(
        collector=collector,
        config=app_config,
        clock=clock,
        process=process,
        perf_fetcher=perf_fetcher,
        memory_fetcher=memory_fetcher,
        players=players,
        events=events,
    )


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "collection": {
            "interval_seconds": 30,
            "min_uptime_seconds": 10,
            "min_ticks": 100,
            "initial_resolution_seconds": 600,
            "fetch_timeout_seconds": 5,
            "ext_stats_host": "",
        },
        "storage": {
            "data_dir": "state",
            "file_name": "stats.json",
            "save_throttle_seconds": 5,
        },
        "summary": {"window_hours": 3, "min_snapshots": 12},
        "optimizer": {"full_resolution_hours": 6, "retention_days": 14},
        "idle": {
            "enabled": False,
            "interval_seconds": 30,
            "max_idle_minutes": 5,
            "max_idle_minutes_setup": 15,
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary configuration file for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield

    from rtmetrics.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)
