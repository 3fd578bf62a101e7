"""
Tests for the asyncio timers.
"""

import asyncio

import pytest

from meeting_recorder.core import Ticker, Timer
from tests.fakes import wait_until


class TestTicker:
    """Tests for the repeating timer."""

    @pytest.mark.asyncio
    async def test_ticks_repeatedly(self):
        calls = []
        ticker = Ticker(0.01, lambda: calls.append(1)).start()

        await wait_until(lambda: len(calls) >= 3)
        ticker.cancel()

        assert ticker.cancelled

    @pytest.mark.asyncio
    async def test_cancel_stops_ticking(self):
        calls = []
        ticker = Ticker(0.01, lambda: calls.append(1)).start()
        await wait_until(lambda: calls)

        ticker.cancel()
        await asyncio.sleep(0.01)
        seen = len(calls)
        await asyncio.sleep(0.05)

        assert len(calls) == seen
        assert not ticker.running

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self):
        calls = []

        async def tick():
            calls.append(1)

        ticker = Ticker(0.01, tick).start()
        await wait_until(lambda: len(calls) >= 2)
        ticker.cancel()

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_running(self):
        calls = []

        def tick():
            calls.append(1)
            raise RuntimeError("sample failed")

        ticker = Ticker(0.01, tick).start()
        await wait_until(lambda: len(calls) >= 3)
        ticker.cancel()

    @pytest.mark.asyncio
    async def test_initial_delay(self):
        calls = []
        ticker = Ticker(0.01, lambda: calls.append(1), initial_delay=0.2).start()

        await asyncio.sleep(0.05)
        assert calls == []
        ticker.cancel()

    @pytest.mark.asyncio
    async def test_cancel_from_own_callback(self):
        ticker = None

        def tick():
            ticker.cancel()

        ticker = Ticker(0.01, tick).start()
        await wait_until(lambda: not ticker.running)

        assert ticker.ticks == 1

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            Ticker(0, lambda: None)


class TestTimer:
    """Tests for the one-shot timer."""

    @pytest.mark.asyncio
    async def test_fires_once(self):
        calls = []
        timer = Timer(0.01, lambda: calls.append(1)).start()

        await wait_until(lambda: timer.fired)
        await asyncio.sleep(0.03)

        assert calls == [1]

    @pytest.mark.asyncio
    async def test_cancel_before_fire(self):
        calls = []
        timer = Timer(0.05, lambda: calls.append(1)).start()

        timer.cancel()
        await asyncio.sleep(0.1)

        assert calls == []
        assert not timer.fired
        assert timer.cancelled

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        timer = Timer(0.05, lambda: None).start()
        timer.cancel()
        timer.cancel()
        assert timer.cancelled
