"""
Playwright Capture

Captures the meeting tab with getDisplayMedia + MediaRecorder inside the page
and bridges it to Python:
- chunks arrive through an exposed function and are published to the CaptureStream
- participant count and audio energy are sampled with page.evaluate
- the "meeting ended by host" dialog is watched in the page and reported back
- browser console output is mirrored into the logger

Every bridge call carries a per-recording token so stale scripts from an
earlier recording on the same page are ignored.
"""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from typing import Callable, List, Optional, Union

from playwright.async_api import ConsoleMessage, Page

from meeting_recorder.config import get_logger
from meeting_recorder.core.exceptions import CaptureError, UnsupportedStateError
from meeting_recorder.recording.detectors import frequency_energy
from .base import CaptureSource, CaptureStream, Chunk, SinkKind

logger = get_logger("playwright_capture")

CaptureLogger = Union[logging.Logger, logging.LoggerAdapter]

CHUNK_BRIDGE = "__meetingRecorderChunk"
END_BRIDGE = "__meetingRecorderEnded"

# Longest the page waits for the recorders to flush their final chunks on stop
STOP_FLUSH_TIMEOUT_MS = 5000


RECORDER_SCRIPT = """
async ({ token, videoInterval, audioInterval, sampleRate, channels, chunkBridge, endBridge, flushTimeout }) => {
    if (window.__meetingRecorder) {
        return { success: false, error: "Recorder already running" };
    }
    if (!navigator.mediaDevices || !navigator.mediaDevices.getDisplayMedia) {
        return { success: false, unsupported: true, error: "MediaDevices or getDisplayMedia not supported" };
    }

    const toBase64 = (buffer) => {
        let binary = "";
        const bytes = new Uint8Array(buffer);
        for (let i = 0; i < bytes.byteLength; i++) {
            binary += String.fromCharCode(bytes[i]);
        }
        return btoa(binary);
    };

    let stream;
    try {
        stream = await navigator.mediaDevices.getDisplayMedia({
            video: true,
            audio: {
                autoGainControl: false,
                channelCount: channels,
                echoCancellation: false,
                noiseSuppression: false,
                sampleRate: sampleRate,
            },
            preferCurrentTab: true,
        });
    } catch (error) {
        return { success: false, error: "getDisplayMedia failed: " + error.message };
    }

    // In-flight bridge calls, awaited by stop() so the final chunks reach Python
    const pending = new Set();
    const forward = (sink) => (event) => {
        const sent = (async () => {
            try {
                const buffer = await event.data.arrayBuffer();
                await window[chunkBridge](token, sink, toBase64(buffer));
            } catch (error) {
                console.error("Error forwarding " + sink + " chunk:", error.message);
            }
        })();
        pending.add(sent);
        sent.finally(() => pending.delete(sent));
    };

    // Resolves after the recorder has emitted its last dataavailable
    const stopRecorder = (recorder) => new Promise((resolve) => {
        if (!recorder || recorder.state === "inactive") {
            resolve();
            return;
        }
        recorder.addEventListener("stop", () => resolve(), { once: true });
        recorder.stop();
    });

    const videoMime = MediaRecorder.isTypeSupported('video/webm; codecs="h264"')
        ? 'video/webm; codecs="h264"'
        : "video/webm";
    const videoRecorder = new MediaRecorder(stream, { mimeType: videoMime });
    videoRecorder.ondataavailable = forward("video-sink");

    let audioRecorder = null;
    if (audioInterval) {
        const audioStream = new MediaStream(stream.getAudioTracks());
        let audioMime = "audio/webm";
        if (MediaRecorder.isTypeSupported("audio/webm; codecs=opus")) {
            audioMime = "audio/webm; codecs=opus";
        } else if (MediaRecorder.isTypeSupported("audio/wav")) {
            audioMime = "audio/wav";
        }
        audioRecorder = new MediaRecorder(audioStream, { mimeType: audioMime });
        audioRecorder.ondataavailable = forward("audio-sink");
    }

    const audioContext = new AudioContext();
    const analyser = audioContext.createAnalyser();
    analyser.fftSize = 256;
    if (stream.getAudioTracks().length) {
        audioContext.createMediaStreamSource(stream).connect(analyser);
    }
    const bins = new Uint8Array(analyser.frequencyBinCount);

    const endWatcher = setInterval(() => {
        let dom = document;
        const iframe = document.querySelector("iframe#webclient");
        if (iframe && iframe.contentDocument) {
            dom = iframe.contentDocument;
        }
        const okButton = Array.from(dom.querySelectorAll("button"))
            .find((el) => el && el.innerText && el.innerText.trim().match(/^OK/i));
        if (!okButton) {
            return;
        }
        let ended = !!dom.querySelector('[aria-label="Meeting is end now"]');
        if (!ended) {
            ended = Array.from(dom.querySelectorAll("div"))
                .some((el) => (el.innerText || "").includes("This meeting has been ended by host"));
        }
        okButton.click();
        if (ended) {
            clearInterval(endWatcher);
            window[endBridge](token);
        }
    }, 2000);

    videoRecorder.start(videoInterval);
    if (audioRecorder) {
        audioRecorder.start(audioInterval);
    }

    window.__meetingRecorder = {
        energy: () => {
            analyser.getByteFrequencyData(bins);
            return Array.from(bins);
        },
        stop: async () => {
            clearInterval(endWatcher);
            window.__meetingRecorder = null;
            const flushed = Promise.all([stopRecorder(videoRecorder), stopRecorder(audioRecorder)])
                .then(() => Promise.all(Array.from(pending)));
            await Promise.race([flushed, new Promise((resolve) => setTimeout(resolve, flushTimeout))]);
            stream.getTracks().forEach((track) => track.stop());
            audioContext.close();
        },
    };

    return {
        success: true,
        videoMime,
        audioTracks: stream.getAudioTracks().length,
        videoTracks: stream.getVideoTracks().length,
    };
}
"""

ENERGY_SCRIPT = "() => window.__meetingRecorder ? window.__meetingRecorder.energy() : []"

STOP_SCRIPT = """
async () => {
    if (window.__meetingRecorder) {
        await window.__meetingRecorder.stop();
    }
}
"""

PARTICIPANT_COUNT_SCRIPT = """
() => {
    let dom = document;
    const iframe = document.querySelector("iframe#webclient");
    if (iframe && iframe.contentDocument) {
        dom = iframe.contentDocument;
    }
    const button = Array.from(dom.querySelectorAll("button"))
        .find((el) => el && el.innerText && el.innerText.trim().match(/^\\d+/));
    if (!button) {
        return null;
    }
    const match = button.innerText.trim().match(/\\d+/);
    return match ? Number(match[0]) : null;
}
"""


class PlaywrightCaptureStream(CaptureStream):
    """CaptureStream whose tracks live in a Playwright page."""

    def __init__(self, page: Page, capture_logger: CaptureLogger):
        super().__init__()
        self._page = page
        self._logger = capture_logger

    async def _release_tracks(self) -> None:
        if self._page.is_closed():
            return
        try:
            await self._page.evaluate(STOP_SCRIPT)
            self._logger.info("Media tracks stopped")
        except Exception as e:
            self._logger.warning(f"Error stopping media tracks: {e}")


class PlaywrightCaptureSource(CaptureSource):
    """Capture collaborator backed by a Playwright page."""

    def __init__(
        self,
        page: Page,
        sample_rate: int = 44100,
        channels: int = 1,
        capture_logger: Optional[CaptureLogger] = None
    ):
        """
        Initialize the capture source.

        Args:
            page: Page showing the joined meeting
            sample_rate: Requested audio sample rate
            channels: Requested audio channel count
            capture_logger: Logger carrying the job context
        """
        self.page = page
        self.sample_rate = sample_rate
        self.channels = channels
        self.token = secrets.token_hex(16)
        self.stream: Optional[PlaywrightCaptureStream] = None
        self._logger = capture_logger or logger
        self._end_callbacks: List[Callable[[], None]] = []
        self._bridged = False

    async def _install_bridge(self) -> None:
        if self._bridged:
            return
        self.page.on("console", self._on_console)
        await self.page.expose_function(CHUNK_BRIDGE, self._handle_chunk)
        await self.page.expose_function(END_BRIDGE, self._handle_meeting_end)
        self._bridged = True

    def _on_console(self, message: ConsoleMessage) -> None:
        try:
            text = f"[browser] {message.text}"
            if message.type == "error":
                self._logger.error(text)
            elif message.type == "warning":
                self._logger.warning(text)
            else:
                self._logger.debug(text)
        except Exception as e:
            self._logger.info(f"Failed to log browser message: {e}")

    def _handle_chunk(self, token: str, sink: str, data: str) -> None:
        if token != self.token or self.stream is None:
            return
        try:
            kind = SinkKind(sink)
            payload = base64.b64decode(data) if data else b""
        except (ValueError, binascii.Error) as e:
            self._logger.warning(f"Discarding malformed chunk from page: {e}")
            return
        self.stream.publish(Chunk(sink=kind, data=payload))

    def _handle_meeting_end(self, token: str) -> None:
        if token != self.token:
            return
        for callback in list(self._end_callbacks):
            try:
                callback()
            except Exception as e:
                self._logger.error(f"Could not process meeting end event: {e}")

    async def start_capture(self, video_interval_ms: int, audio_interval_ms: Optional[int]) -> CaptureStream:
        await self._install_bridge()
        self.stream = PlaywrightCaptureStream(self.page, self._logger)

        result = await self.page.evaluate(RECORDER_SCRIPT, {
            "token": self.token,
            "videoInterval": video_interval_ms,
            "audioInterval": audio_interval_ms,
            "sampleRate": self.sample_rate,
            "channels": self.channels,
            "chunkBridge": CHUNK_BRIDGE,
            "endBridge": END_BRIDGE,
            "flushTimeout": STOP_FLUSH_TIMEOUT_MS,
        })

        if not result or not result.get("success"):
            error = (result or {}).get("error", "unknown error")
            self.stream = None
            if (result or {}).get("unsupported"):
                raise UnsupportedStateError(f"Browser cannot capture the meeting tab: {error}")
            raise CaptureError(f"Recorder failed to start in page: {error}")

        self._logger.info(
            f"Capture started: {result.get('videoTracks')} video / {result.get('audioTracks')} audio track(s), "
            f"mime={result.get('videoMime')}"
        )
        return self.stream

    async def sample_participant_count(self) -> Optional[int]:
        count = await self.page.evaluate(PARTICIPANT_COUNT_SCRIPT)
        return int(count) if count is not None else None

    async def sample_audio_energy(self) -> float:
        bins = await self.page.evaluate(ENERGY_SCRIPT)
        return frequency_energy(bins or [])

    def on_external_end_signal(self, callback: Callable[[], None]) -> None:
        self._end_callbacks.append(callback)
