"""
Tests for the Task base class and the recording task.
"""

import asyncio

import pytest

from meeting_recorder.config import AudioStreamingSettings
from meeting_recorder.core import Task
from meeting_recorder.recording import RecordingParams, StopReason
from meeting_recorder.tasks import RecordingTask
from tests.fakes import wait_until


class EchoTask(Task[str, str]):
    async def execute(self, input: str) -> str:
        return input.upper()


class FailingTask(Task[None, None]):
    async def execute(self, input: None) -> None:
        raise RuntimeError("boom")


class TestTaskLifecycle:
    """Tests for lifecycle flags."""

    @pytest.mark.asyncio
    async def test_successful_run(self):
        task = EchoTask()

        assert await task.run("hello") == "HELLO"
        assert task.completed
        assert not task.faulted
        assert not task.running

    @pytest.mark.asyncio
    async def test_failed_run_reraises(self):
        task = FailingTask()

        with pytest.raises(RuntimeError):
            await task.run(None)

        assert task.faulted
        assert not task.completed
        assert not task.running

    def test_shutdown_probe(self):
        assert EchoTask().is_shutdown_requested() is False
        assert EchoTask(shutdown_probe=lambda: True).is_shutdown_requested() is True


class TestRecordingTask:
    """Tests for the orchestrated recording task."""

    @pytest.mark.asyncio
    async def test_runs_recording_to_completion(self, fake_capture, video_sink, recording_settings):
        params = RecordingParams(
            user_id="user-1",
            team_id="team-1",
            max_duration_ms=60_000,
            inactivity_limit_ms=60_000,
            grace_period_ms=0,
        )
        task = RecordingTask(
            params,
            fake_capture,
            video_sink,
            shutdown_probe=lambda: True,
            audio_settings=AudioStreamingSettings(enabled=False),
            recording_settings=recording_settings,
        )

        running = asyncio.create_task(task.run(None))
        await wait_until(lambda: fake_capture.stream is not None and task.orchestrator._timers)
        fake_capture.signal_end()
        result = await asyncio.wait_for(running, timeout=2)

        assert result.stop_reason == StopReason.MEETING_ENDED
        assert task.completed
        assert video_sink.closed
