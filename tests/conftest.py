"""Shared fixtures for the test suite."""

import pytest

from meeting_recorder.config import AudioStreamingSettings, RecordingSettings, SchedulerSettings
from tests.fakes import FakeCaptureSource, MemoryVideoSink


@pytest.fixture
def recording_settings():
    return RecordingSettings(
        video_chunk_duration_ms=20,
        presence_check_interval_ms=10,
        silence_check_interval_ms=10,
        silence_threshold=10.0,
        min_participants=2,
        teardown_grace_seconds=1.0,
    )


@pytest.fixture
def audio_settings():
    return AudioStreamingSettings(
        enabled=True,
        ws_endpoint="ws://transcriber.test/api/ws/audio",
        sample_rate=16000,
        channels=1,
        format="wav",
        chunk_duration_ms=10,
    )


@pytest.fixture
def scheduler_settings():
    return SchedulerSettings(
        max_attempts=3,
        retry_backoff_seconds=30,
        completion_poll_interval_seconds=0.01,
    )


@pytest.fixture
def fake_capture():
    return FakeCaptureSource()


@pytest.fixture
def video_sink():
    return MemoryVideoSink()
