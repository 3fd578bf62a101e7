"""
Tests for video sinks.
"""

from datetime import datetime

import pytest

from meeting_recorder.capture import Chunk, SinkKind
from meeting_recorder.recording import FileVideoSink, recording_name


class TestFileVideoSink:
    """Tests for the local WebM file sink."""

    @pytest.mark.asyncio
    async def test_appends_chunks(self, tmp_path):
        sink = FileVideoSink("rec-1", base_dir=tmp_path)

        await sink.write(Chunk(sink=SinkKind.VIDEO, data=b"\x1a\x45\xdf\xa3"))
        await sink.write(Chunk(sink=SinkKind.VIDEO, data=b"cluster"))
        await sink.close()

        assert sink.file_path == tmp_path / "rec-1" / "recording.webm"
        assert sink.file_path.read_bytes() == b"\x1a\x45\xdf\xa3cluster"
        assert sink.chunks_written == 2
        assert sink.bytes_written == 11

    @pytest.mark.asyncio
    async def test_close_without_writes(self, tmp_path):
        sink = FileVideoSink("rec-2", base_dir=tmp_path)
        await sink.close()
        assert not sink.file_path.exists()


def test_recording_name():
    when = datetime(2024, 3, 5, 14, 7)
    assert recording_name("google", when) == "Google Meet Recording 2024-03-05 14:07"
    assert recording_name("zoom", when) == "Recording 2024-03-05 14:07"
