"""
Video sinks.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from meeting_recorder.config import settings, get_logger
from meeting_recorder.capture.base import Chunk

logger = get_logger("sinks")


class VideoSink(Protocol):
    """Destination for video chunks."""

    async def write(self, chunk: Chunk) -> None:
        ...

    async def close(self) -> None:
        ...


def recording_name(provider: str = "google", when: Optional[datetime] = None) -> str:
    """Human-readable recording name."""
    prefix = "Google Meet Recording" if provider == "google" else "Recording"
    when = when or datetime.now()
    return f"{prefix} {when.strftime('%Y-%m-%d %H:%M')}"


class FileVideoSink:
    """Appends video chunks to a local WebM file."""

    def __init__(self, recording_id: str, base_dir: Optional[Path] = None, filename: str = "recording.webm"):
        """
        Initialize the file sink.

        Args:
            recording_id: Directory name for this recording
            base_dir: Recordings root (defaults to settings.recording.local_path)
            filename: Output file name
        """
        self.recording_id = recording_id
        self.base_dir = Path(base_dir or settings.recording.local_path)
        self.recording_dir = self.base_dir / recording_id
        self.file_path = self.recording_dir / filename
        self.bytes_written = 0
        self.chunks_written = 0
        self._handle = None

    def _open(self):
        if self._handle is None:
            self.recording_dir.mkdir(parents=True, exist_ok=True)
            self._handle = open(self.file_path, "ab")
            logger.info(f"Writing video to: {self.file_path}")
        return self._handle

    def _append(self, data: bytes) -> None:
        handle = self._open()
        handle.write(data)
        handle.flush()

    async def write(self, chunk: Chunk) -> None:
        await asyncio.to_thread(self._append, chunk.data)
        self.bytes_written += chunk.size
        self.chunks_written += 1

    async def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.info(
                f"Video file closed: {self.file_path} "
                f"({self.chunks_written} chunks, {self.bytes_written / 1024 / 1024:.2f} MB)"
            )
