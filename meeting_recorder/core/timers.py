"""
Repeating and one-shot timers on the asyncio event loop.

Each timer owns a single asyncio.Task and a cancel handle, so every timer of a
recording can be cancelled from one place when the recording stops.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from meeting_recorder.config import get_logger

logger = get_logger("timers")

TimerCallback = Callable[[], Union[None, Awaitable[Any]]]


async def _invoke(callback: TimerCallback) -> None:
    result = callback()
    if inspect.isawaitable(result):
        await result


class Ticker:
    """
    Calls ``callback`` every ``interval`` seconds after an optional initial delay.

    A callback that raises is logged and the ticker keeps running.
    """

    def __init__(
        self,
        interval: float,
        callback: TimerCallback,
        name: str = "ticker",
        initial_delay: float = 0.0
    ):
        if interval <= 0:
            raise ValueError("Ticker interval must be positive")
        self.interval = interval
        self.initial_delay = initial_delay
        self.name = name
        self._callback = callback
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self.ticks = 0

    def start(self) -> "Ticker":
        if self._task is None and not self._cancelled:
            self._task = asyncio.create_task(self._run(), name=self.name)
        return self

    async def _run(self) -> None:
        if self.initial_delay > 0:
            await asyncio.sleep(self.initial_delay)
        while not self._cancelled:
            self.ticks += 1
            try:
                await _invoke(self._callback)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"{self.name} tick failed: {e}")
            if self._cancelled:
                break
            await asyncio.sleep(self.interval)

    def cancel(self) -> None:
        """Stop the ticker. Safe to call more than once, including from its own callback."""
        self._cancelled = True
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()


class Timer:
    """Calls ``callback`` once after ``delay`` seconds unless cancelled first."""

    def __init__(self, delay: float, callback: TimerCallback, name: str = "timer"):
        self.delay = delay
        self.name = name
        self._callback = callback
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False
        self.fired = False

    def start(self) -> "Timer":
        if self._task is None and not self._cancelled:
            self._task = asyncio.create_task(self._run(), name=self.name)
        return self

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        if self._cancelled:
            return
        self.fired = True
        try:
            await _invoke(self._callback)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"{self.name} callback failed: {e}")

    def cancel(self) -> None:
        self._cancelled = True
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
