"""
Recording Orchestrator

Runs one recording end to end:
- opens the audio streaming session (optional, never fatal)
- starts capture and routes video chunks to the video sink and audio chunks
  to the streaming session, each on its own loop
- arms the max-duration timer, presence and silence detectors and the
  external "meeting ended" signal
- stops everything exactly once, in order, whichever trigger fires first
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Union

from meeting_recorder.config import get_logger, settings, AudioStreamingSettings, RecordingSettings
from meeting_recorder.core.exceptions import CaptureError, JobError
from meeting_recorder.core.timers import Ticker, Timer
from meeting_recorder.capture.base import CaptureSource, CaptureStream, SinkKind
from meeting_recorder.streaming.stream_session import StreamConfig, StreamSession
from .detectors import InactivityState, PresenceDetector, SilenceDetector
from .sinks import VideoSink

logger = get_logger("recording")

OrchestratorLogger = Union[logging.Logger, logging.LoggerAdapter]
SessionFactory = Callable[[], StreamSession]

# Time allowed for the chunk loops to flush in-flight chunks during stop
LOOP_DRAIN_TIMEOUT_SECONDS = 5.0


class StopReason(str, Enum):
    """Why a recording stopped."""
    MAX_DURATION = "max_duration"
    ALONE = "alone_in_meeting"
    SILENCE = "silence"
    MEETING_ENDED = "meeting_ended"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class RecordingParams:
    """Identifiers and limits of one recording."""
    user_id: str
    team_id: str
    max_duration_ms: int
    inactivity_limit_ms: int
    grace_period_ms: int
    bot_id: Optional[str] = None
    event_id: Optional[str] = None
    audio_session_id: Optional[str] = None

    @classmethod
    def from_settings(cls, user_id: str, team_id: str, **overrides) -> "RecordingParams":
        values = dict(
            user_id=user_id,
            team_id=team_id,
            max_duration_ms=settings.max_recording_duration_ms,
            inactivity_limit_ms=settings.inactivity_limit_ms,
            grace_period_ms=settings.grace_period_ms,
        )
        values.update(overrides)
        return cls(**values)


@dataclass
class RecordingResult:
    """Summary of a finished recording."""
    stop_reason: Optional[StopReason]
    started_at: datetime
    stopped_at: Optional[datetime] = None
    video_chunks: int = 0
    video_bytes: int = 0
    audio_chunks_sent: int = 0
    audio_chunks_dropped: int = 0
    empty_chunks: int = 0
    sink_errors: int = 0
    audio_streaming: bool = False
    session_id: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        if not self.stopped_at:
            return 0.0
        return (self.stopped_at - self.started_at).total_seconds()


class RecordingOrchestrator:
    """Coordinates capture, the two sinks and the termination triggers of one recording."""

    def __init__(
        self,
        params: RecordingParams,
        capture: CaptureSource,
        video_sink: VideoSink,
        audio_settings: Optional[AudioStreamingSettings] = None,
        recording_settings: Optional[RecordingSettings] = None,
        session_factory: Optional[SessionFactory] = None,
        on_complete: Optional[Callable[[RecordingResult], None]] = None,
        orchestrator_logger: Optional[OrchestratorLogger] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            params: Identifiers and limits
            capture: Capture collaborator
            video_sink: Destination of video chunks
            audio_settings: Streaming configuration (defaults to global settings)
            recording_settings: Intervals and thresholds (defaults to global settings)
            session_factory: Builds the StreamSession (defaults to a WebSocket session)
            on_complete: Called once when the recording has fully stopped
            orchestrator_logger: Logger carrying the job context
        """
        self.params = params
        self.capture = capture
        self.video_sink = video_sink
        self.audio_settings = audio_settings or settings.audio_streaming
        self.recording_settings = recording_settings or settings.recording
        self._logger = orchestrator_logger or logger
        self._session_factory = session_factory or self._default_session
        self._on_complete = on_complete

        self.session: Optional[StreamSession] = None
        self.stream: Optional[CaptureStream] = None
        self.inactivity = InactivityState()
        self.result = RecordingResult(stop_reason=None, started_at=datetime.now())

        self._stopped = False
        self._completed = asyncio.Event()
        self._loops: List[asyncio.Task] = []
        self._timers: List[Union[Ticker, Timer]] = []
        self._stop_tasks: List[asyncio.Task] = []
        self._warned_audio_drop = False

    def _default_session(self) -> StreamSession:
        return StreamSession(
            StreamConfig.from_settings(self.audio_settings),
            user_id=self.params.user_id,
            session_logger=self._logger,
        )

    @property
    def audio_enabled(self) -> bool:
        return self.audio_settings.enabled

    @property
    def is_recording_stopped(self) -> bool:
        return self._stopped

    async def run(self) -> RecordingResult:
        """
        Record until a termination trigger fires.

        Raises:
            CaptureError: If capture cannot be started
        """
        self.result.started_at = datetime.now()

        if self.audio_enabled:
            await self._open_audio_session()
        else:
            self._logger.info("Audio streaming is disabled")

        try:
            self.stream = await self.capture.start_capture(
                self.recording_settings.video_chunk_duration_ms,
                self.audio_settings.chunk_duration_ms if self.audio_enabled else None,
            )
        except Exception as e:
            self._logger.error(f"Failed to start capture: {e}")
            if self.session is not None:
                await self.session.close()
            if isinstance(e, JobError):
                raise
            raise CaptureError(f"Failed to start capture: {e}", cause=e) from e

        self._logger.info(
            f"Recording started (max {self.params.max_duration_ms / 60000:.1f} min, "
            f"inactivity limit {self.params.inactivity_limit_ms / 1000:.0f}s)"
        )

        self._loops.append(asyncio.create_task(self._video_loop(), name="video-loop"))
        if self.audio_enabled:
            self._loops.append(asyncio.create_task(self._audio_loop(), name="audio-loop"))

        self._arm_termination()

        timeout = self.params.max_duration_ms / 1000 + self.recording_settings.teardown_grace_seconds
        try:
            await asyncio.wait_for(self._completed.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            if self._stopped:
                self._logger.warning("Recording teardown is overrunning, waiting for it to finish")
            else:
                self._logger.warning("Recording did not stop in time, forcing stop")
                await self.stop_recording(StopReason.TIMEOUT)
        except asyncio.CancelledError:
            await self.stop_recording(StopReason.ERROR)
            await self._completed.wait()
            raise

        # The first stop_recording may still be tearing down in a timer or detector task
        await self._completed.wait()
        if self._stop_tasks:
            await asyncio.gather(*self._stop_tasks, return_exceptions=True)

        try:
            await self.video_sink.close()
        except Exception as e:
            self._logger.error(f"Error closing video sink: {e}")

        self._logger.info(
            f"Recording finished: reason={self.result.stop_reason.value if self.result.stop_reason else None}, "
            f"video_chunks={self.result.video_chunks}, audio_sent={self.result.audio_chunks_sent}, "
            f"audio_dropped={self.result.audio_chunks_dropped}"
        )
        return self.result

    async def _open_audio_session(self) -> None:
        session: Optional[StreamSession] = None
        try:
            session = self._session_factory()
            await session.connect(self.params.audio_session_id)
        except Exception as e:
            self._logger.error(f"Audio streaming unavailable, continuing with video only: {e}")
            if session is not None:
                await session.close()
            return
        self.session = session
        self.result.audio_streaming = True

    def _arm_termination(self) -> None:
        grace = self.params.grace_period_ms / 1000
        rs = self.recording_settings

        self._timers.append(Timer(
            self.params.max_duration_ms / 1000,
            lambda: self.stop_recording(StopReason.MAX_DURATION),
            name="max-duration",
        ).start())

        presence = PresenceDetector(rs.min_participants, state=self.inactivity)
        silence = SilenceDetector(
            self.params.inactivity_limit_ms,
            threshold=rs.silence_threshold,
            sample_interval_ms=rs.silence_check_interval_ms,
            state=self.inactivity,
        )

        async def check_presence() -> None:
            count = await self.capture.sample_participant_count()
            if presence.observe(count):
                self._logger.info(f"Detected bot is alone in meeting ({count} participant(s)), ending recording")
                await self.stop_recording(StopReason.ALONE)

        async def check_silence() -> None:
            energy = await self.capture.sample_audio_energy()
            if silence.observe(energy):
                self._logger.warning(
                    f"Detected silence in meeting for {silence.silence_ms}ms, ending recording"
                )
                await self.stop_recording(StopReason.SILENCE)

        self._timers.append(Ticker(
            rs.presence_check_interval_ms / 1000, check_presence,
            name="presence-detector", initial_delay=grace,
        ).start())
        self._timers.append(Ticker(
            rs.silence_check_interval_ms / 1000, check_silence,
            name="silence-detector", initial_delay=grace,
        ).start())

        self.capture.on_external_end_signal(self._on_meeting_ended)
        self._logger.info(f"Inactivity detection will activate in {grace:.0f}s")

    def _on_meeting_ended(self) -> None:
        if self._stopped:
            return
        self._logger.info("Detected meeting has been ended by host, ending recording")
        self._stop_tasks.append(asyncio.create_task(self.stop_recording(StopReason.MEETING_ENDED)))

    async def _video_loop(self) -> None:
        # Video drains until end of stream, including chunks the recorder flushes on stop
        async for chunk in self.stream.chunks(SinkKind.VIDEO):
            if not chunk.size:
                self.result.empty_chunks += 1
                self._logger.warning("Received empty video chunk...")
                continue
            try:
                await self.video_sink.write(chunk)
                self.result.video_chunks += 1
                self.result.video_bytes += chunk.size
            except Exception as e:
                self.result.sink_errors += 1
                self._logger.error(f"Error writing video chunk: {e}")

    async def _audio_loop(self) -> None:
        async for chunk in self.stream.chunks(SinkKind.AUDIO):
            if self._stopped:
                continue
            if not chunk.size:
                self.result.empty_chunks += 1
                self._logger.warning("Received empty audio chunk...")
                continue

            sent = False
            if self.session is not None:
                try:
                    sent = await self.session.send_chunk(chunk.data)
                except Exception as e:
                    self.result.sink_errors += 1
                    self._logger.error(f"Error sending audio chunk: {e}")

            if sent and not self._stopped:
                self.result.audio_chunks_sent += 1
            elif not sent:
                self.result.audio_chunks_dropped += 1
                if not self._warned_audio_drop:
                    self._warned_audio_drop = True
                    self._logger.warning("Audio streaming session not open, dropping audio chunks")
                else:
                    self._logger.debug("Dropped audio chunk")

    async def stop_recording(self, reason: StopReason) -> None:
        """
        Stop the recording. Only the first call has any effect.

        Order: chunk loops, media tracks, streaming session, timers, completion signal.
        """
        if self._stopped:
            return
        self._stopped = True
        self.result.stop_reason = reason
        self._logger.info(f"Stopping recording: {reason.value}")

        try:
            # Loops see _stopped; ending the tracks closes their channels
            if self.stream is not None:
                try:
                    await self.stream.stop_all_tracks()
                except Exception as e:
                    self._logger.error(f"Error stopping media tracks: {e}")

            loops = [task for task in self._loops if task is not asyncio.current_task()]
            if loops:
                done, pending = await asyncio.wait(loops, timeout=LOOP_DRAIN_TIMEOUT_SECONDS)
                for task in pending:
                    task.cancel()

            if self.session is not None:
                self.result.session_id = self.session.session_id
                await self.session.close()

            for timer in self._timers:
                timer.cancel()
        finally:
            self.result.stopped_at = datetime.now()
            self._completed.set()
            if self._on_complete:
                try:
                    self._on_complete(self.result)
                except Exception as e:
                    self._logger.error(f"Completion hook error: {e}")
