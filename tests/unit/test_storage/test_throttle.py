"""
Unit tests for the trailing-edge save throttle.
"""

import asyncio
import logging

import pytest

from rtmetrics.storage.throttle import ThrottledCall


class Counter:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error


@pytest.mark.unit
class TestThrottledCall:
    """Test cases for ThrottledCall."""

    @pytest.mark.asyncio
    async def test_no_leading_call(self):
        counter = Counter()
        throttle = ThrottledCall(0.05, counter, name="save")

        throttle.request()
        await asyncio.sleep(0)

        assert counter.calls == 0
        assert throttle.pending is True
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_requests_are_coalesced(self):
        counter = Counter()
        throttle = ThrottledCall(0.02, counter, name="save")

        for _ in range(5):
            throttle.request()
        await asyncio.sleep(0.1)

        assert counter.calls == 1
        assert throttle.pending is False

    @pytest.mark.asyncio
    async def test_request_after_fire_schedules_again(self):
        counter = Counter()
        throttle = ThrottledCall(0.02, counter, name="save")

        throttle.request()
        await asyncio.sleep(0.1)
        throttle.request()
        await asyncio.sleep(0.1)

        assert counter.calls == 2

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_call(self):
        counter = Counter()
        throttle = ThrottledCall(0.02, counter, name="save")

        throttle.request()
        assert throttle.cancel() is True
        assert throttle.cancel() is False
        await asyncio.sleep(0.1)

        assert counter.calls == 0

    @pytest.mark.asyncio
    async def test_flush_runs_pending_call_now(self):
        counter = Counter()
        throttle = ThrottledCall(60, counter, name="save")

        throttle.request()
        await throttle.flush()

        assert counter.calls == 1
        assert throttle.pending is False

    @pytest.mark.asyncio
    async def test_flush_without_pending_call(self):
        counter = Counter()
        throttle = ThrottledCall(60, counter, name="save")

        await throttle.flush()

        assert counter.calls == 0

    @pytest.mark.asyncio
    async def test_errors_are_logged(self, caplog):
        counter = Counter(error=OSError("disk full"))
        throttle = ThrottledCall(60, counter, name="save")

        throttle.request()
        with caplog.at_level(logging.ERROR):
            await throttle.flush()

        assert counter.calls == 1
        assert "Throttled save call failed: disk full" in caplog.text
