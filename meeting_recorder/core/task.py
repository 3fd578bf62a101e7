"""
Base class for cancellable, loggable background work.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar, Union

from meeting_recorder.config import get_logger

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")

TaskLogger = Union[logging.Logger, logging.LoggerAdapter]


class Task(ABC, Generic[InputT, OutputT]):
    """
    One unit of work with lifecycle flags.

    Subclasses implement ``execute``. Long-running loops inside ``execute``
    should poll ``is_shutdown_requested()`` at safe points. Tasks never retry
    themselves; the scheduler owns retries.
    """

    def __init__(
        self,
        logger: Optional[TaskLogger] = None,
        shutdown_probe: Optional[Callable[[], bool]] = None
    ):
        self._logger: TaskLogger = logger or get_logger("task")
        self._shutdown_probe = shutdown_probe
        self.running = False
        self.completed = False
        self.faulted = False

    @abstractmethod
    async def execute(self, input: InputT) -> OutputT:
        ...

    async def run(self, input: InputT) -> OutputT:
        """Run ``execute`` and track its lifecycle."""
        self.running = True
        self.completed = False
        self.faulted = False
        try:
            result = await self.execute(input)
            self.completed = True
            return result
        except Exception as e:
            self.faulted = True
            self._logger.error(f"{type(self).__name__} failed: {e}")
            raise
        finally:
            self.running = False

    def is_shutdown_requested(self) -> bool:
        if self._shutdown_probe is None:
            return False
        return self._shutdown_probe()
