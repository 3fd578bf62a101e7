"""
Audio Streaming Session

WebSocket session that forwards raw audio chunks to the transcription service.

Protocol:
- New session:    {endpoint}?user_id=..&sample_rate=..&channels=..&format=..
- Resume session: {endpoint}/{session_id}?user_id=..
- Inbound text frames are JSON; {"session_id": "..."} assigns the id of a new session
- Outbound binary frames are raw audio bytes
- Closing sends {"type": "control", "action": "close_session"} then closes the socket

Sending and closing never raise: the caller is a real-time loop that has to
keep running whatever the health of the streaming service.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.parse import quote, urlencode, urlsplit

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed

from meeting_recorder.config import get_logger, AudioStreamingSettings
from meeting_recorder.core.exceptions import ConfigurationError, StreamSessionError

logger = get_logger("stream_session")

Connector = Callable[..., Awaitable[Any]]
SessionLogger = Union[logging.Logger, logging.LoggerAdapter]

CLOSE_SESSION_MESSAGE = {"type": "control", "action": "close_session"}


class SocketState(str, Enum):
    """Lifecycle of the streaming socket."""
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(frozen=True)
class StreamConfig:
    """Stream parameters announced when creating a new session."""
    endpoint: str
    sample_rate: int = 44100
    channels: int = 1
    format: str = "wav"
    open_timeout: float = 10.0

    def __post_init__(self) -> None:
        if urlsplit(self.endpoint).scheme not in ("ws", "wss"):
            raise ConfigurationError(f"Audio streaming endpoint must be a ws:// or wss:// URL: {self.endpoint!r}")

    @classmethod
    def from_settings(cls, audio_settings: AudioStreamingSettings) -> "StreamConfig":
        return cls(
            endpoint=audio_settings.ws_endpoint,
            sample_rate=audio_settings.sample_rate,
            channels=audio_settings.channels,
            format=audio_settings.format,
            open_timeout=audio_settings.connect_timeout_seconds,
        )


class StreamSession:
    """Manages one WebSocket streaming session (connecting -> open -> closing -> closed)."""

    def __init__(
        self,
        config: StreamConfig,
        user_id: str,
        session_logger: Optional[SessionLogger] = None,
        connector: Optional[Connector] = None
    ):
        """
        Initialize a streaming session.

        Args:
            config: Endpoint and stream parameters
            user_id: User the audio belongs to
            session_logger: Logger carrying the job context
            connector: Coroutine function opening the socket (defaults to websockets)
        """
        self.config = config
        self.user_id = user_id
        self.session_id: Optional[str] = None
        self.state: SocketState = SocketState.CLOSED
        self.chunks_sent = 0
        self._logger = session_logger or logger
        self._connector: Connector = connector or ws_connect
        self._ws: Optional[Any] = None
        self._resumed = False
        self._reader: Optional[asyncio.Task] = None

    def build_url(self, session_id: Optional[str] = None) -> str:
        """Build the connect URL for a new or resumed session."""
        endpoint = self.config.endpoint.rstrip("/")
        if session_id:
            query = urlencode({"user_id": self.user_id})
            return f"{endpoint}/{quote(session_id, safe='')}?{query}"
        query = urlencode({
            "user_id": self.user_id,
            "sample_rate": str(self.config.sample_rate),
            "channels": str(self.config.channels),
            "format": self.config.format,
        })
        return f"{endpoint}?{query}"

    async def connect(self, session_id: Optional[str] = None) -> Optional[str]:
        """
        Open the socket.

        Args:
            session_id: Existing session to resume; a new session is created when omitted

        Returns:
            The session id known so far (None for a new session until the service assigns one)

        Raises:
            StreamSessionError: If the transport cannot be opened
        """
        if self.state in (SocketState.CONNECTING, SocketState.OPEN):
            raise StreamSessionError(f"Session already {self.state.value}")

        url = self.build_url(session_id)
        self._resumed = bool(session_id)
        self.session_id = session_id
        self.state = SocketState.CONNECTING

        if session_id:
            self._logger.info(f"Connecting to existing audio session: {url}")
        else:
            self._logger.info(
                f"Creating new audio session: {url} "
                f"({self.config.sample_rate}Hz, {self.config.channels}ch, {self.config.format})"
            )

        try:
            self._ws = await self._connector(url, open_timeout=self.config.open_timeout)
        except Exception as e:
            self.state = SocketState.CLOSED
            self._ws = None
            self._logger.error(f"Audio streaming WebSocket error: {e}")
            raise StreamSessionError(
                f"Failed to connect to audio streaming service: {e}",
                details={"url": url}
            ) from e

        if self.state != SocketState.CONNECTING:
            # close() ran while the handshake was in flight
            try:
                await self._ws.close()
            except Exception as e:
                self._logger.debug(f"Error closing abandoned socket: {e}")
            self._ws = None
            self.state = SocketState.CLOSED
            raise StreamSessionError("Session was closed while connecting")

        self.state = SocketState.OPEN
        self._reader = asyncio.create_task(self._read_messages(), name="stream-session-reader")
        self._logger.info(f"Audio streaming WebSocket connected: {url}")
        return self.session_id

    async def _read_messages(self) -> None:
        ws = self._ws
        try:
            async for message in ws:
                self.handle_message(message)
        except asyncio.CancelledError:
            raise
        except ConnectionClosed as e:
            self._logger.info(f"Audio streaming WebSocket closed by remote: {e}")
        except Exception as e:
            self._logger.warning(f"Audio streaming reader stopped: {e}")
        finally:
            if self._ws is ws and self.state == SocketState.OPEN:
                self.state = SocketState.CLOSED
                self._logger.info("Audio streaming WebSocket closed")

    def handle_message(self, message: Union[str, bytes]) -> None:
        """Process one inbound control frame. Never raises."""
        try:
            text = message.decode("utf-8") if isinstance(message, (bytes, bytearray)) else message
            response = json.loads(text)
        except (ValueError, UnicodeDecodeError) as e:
            self._logger.warning(f"Failed to parse audio streaming response: {e}")
            return

        if not isinstance(response, dict):
            self._logger.debug(f"Ignoring non-object control frame: {response!r}")
            return

        assigned = response.get("session_id")
        if assigned and not self._resumed and not self.session_id:
            self.session_id = str(assigned)
            self._logger.info(f"Audio session ID assigned: {self.session_id}")

    async def send_chunk(self, data: bytes) -> bool:
        """
        Send one raw audio chunk.

        Returns:
            True when the chunk was handed to the socket, False when it should be dropped
        """
        if self.state != SocketState.OPEN or self._ws is None:
            self._logger.debug(f"Cannot send audio chunk - socket is {self.state.value}")
            return False

        try:
            await self._ws.send(bytes(data))
        except Exception as e:
            self._logger.error(f"Failed to send audio chunk: {e}")
            return False

        self.chunks_sent += 1
        return True

    async def close(self) -> None:
        """Close the session. No-op when never connected or already closed."""
        if self.state in (SocketState.CLOSED, SocketState.CLOSING):
            return

        if self.state == SocketState.CONNECTING:
            # connect() sees this and discards the socket once the handshake returns
            self.state = SocketState.CLOSING
            return

        ws = self._ws
        self.state = SocketState.CLOSING
        self._logger.info("Closing audio streaming session...")

        if ws is not None:
            try:
                await ws.send(json.dumps(CLOSE_SESSION_MESSAGE))
            except Exception as e:
                self._logger.warning(f"Could not send close message: {e}")

            try:
                await ws.close()
            except Exception as e:
                self._logger.error(f"Error closing audio stream: {e}")

        if self._reader is not None and not self._reader.done():
            self._reader.cancel()
            try:
                await self._reader
            except (asyncio.CancelledError, Exception):
                pass

        self._ws = None
        self._reader = None
        self.state = SocketState.CLOSED
        self._logger.info(f"Audio streaming session closed (session_id={self.session_id})")

    @property
    def is_open(self) -> bool:
        return self.state == SocketState.OPEN
