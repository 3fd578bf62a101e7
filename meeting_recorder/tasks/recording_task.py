"""
Recording task - one orchestrated recording as a Task.
"""

from __future__ import annotations

from typing import Callable, Optional

from meeting_recorder.config import AudioStreamingSettings, RecordingSettings
from meeting_recorder.core.task import Task, TaskLogger
from meeting_recorder.capture.base import CaptureSource
from meeting_recorder.recording.orchestrator import (
    RecordingOrchestrator,
    RecordingParams,
    RecordingResult,
    SessionFactory,
)
from meeting_recorder.recording.sinks import VideoSink


class RecordingTask(Task[None, RecordingResult]):
    """Runs a RecordingOrchestrator to completion."""

    def __init__(
        self,
        params: RecordingParams,
        capture: CaptureSource,
        video_sink: VideoSink,
        logger: Optional[TaskLogger] = None,
        shutdown_probe: Optional[Callable[[], bool]] = None,
        audio_settings: Optional[AudioStreamingSettings] = None,
        recording_settings: Optional[RecordingSettings] = None,
        session_factory: Optional[SessionFactory] = None
    ):
        super().__init__(logger, shutdown_probe)
        self.params = params
        self.orchestrator = RecordingOrchestrator(
            params,
            capture,
            video_sink,
            audio_settings=audio_settings,
            recording_settings=recording_settings,
            session_factory=session_factory,
            orchestrator_logger=self._logger,
        )

    async def execute(self, input: None) -> RecordingResult:
        if self.is_shutdown_requested():
            self._logger.info("Shutdown requested, recording will run to completion before exit")
        return await self.orchestrator.run()
