"""
Capture collaborator interface.

A CaptureSource starts capture and answers signal samples; the CaptureStream
it returns delivers chunks through one asyncio queue per sink. The recording
orchestrator only consumes these channels and never touches the browser.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Callable, Dict, Optional


class SinkKind(str, Enum):
    """Destination of a chunk."""
    VIDEO = "video-sink"
    AUDIO = "audio-sink"


@dataclass
class Chunk:
    """A slice of captured media bound for one sink."""
    sink: SinkKind
    data: bytes
    timestamp: float = field(default_factory=time.time)

    @property
    def size(self) -> int:
        return len(self.data)


_END_OF_STREAM = object()


class CaptureStream:
    """
    Live audio/video capture handle.

    Producers call ``publish``; consumers iterate ``chunks(sink)`` in capture
    order. ``stop_all_tracks`` releases the underlying tracks once and ends
    every channel. Chunks flushed while the tracks are being released are
    still delivered; only publishes after release are dropped.
    """

    def __init__(self) -> None:
        self._channels: Dict[SinkKind, asyncio.Queue] = {kind: asyncio.Queue() for kind in SinkKind}
        self._stopping = False
        self._stopped = False
        self.tracks_stopped = 0

    def publish(self, chunk: Chunk) -> None:
        if self._stopped:
            return
        self._channels[chunk.sink].put_nowait(chunk)

    async def chunks(self, sink: SinkKind) -> AsyncIterator[Chunk]:
        queue = self._channels[sink]
        while True:
            item = await queue.get()
            if item is _END_OF_STREAM:
                return
            yield item

    async def stop_all_tracks(self) -> None:
        if self._stopping:
            return
        self._stopping = True
        self.tracks_stopped += 1
        try:
            await self._release_tracks()
        finally:
            self._stopped = True
            for queue in self._channels.values():
                queue.put_nowait(_END_OF_STREAM)

    async def _release_tracks(self) -> None:
        """Stop the underlying media tracks, flushing any final chunks through ``publish``."""

    @property
    def stopped(self) -> bool:
        return self._stopped


class CaptureSource(ABC):
    """Browser-side capability that produces a CaptureStream and signal samples."""

    @abstractmethod
    async def start_capture(self, video_interval_ms: int, audio_interval_ms: Optional[int]) -> CaptureStream:
        """
        Start capturing.

        Args:
            video_interval_ms: Video chunk interval
            audio_interval_ms: Audio chunk interval, or None when no audio sink is wanted
        """

    @abstractmethod
    async def sample_participant_count(self) -> Optional[int]:
        """Current participant count, or None when it cannot be read."""

    @abstractmethod
    async def sample_audio_energy(self) -> float:
        """Current audio activity level."""

    @abstractmethod
    def on_external_end_signal(self, callback: Callable[[], None]) -> None:
        """Register a callback for the out-of-band "meeting ended" signal."""
