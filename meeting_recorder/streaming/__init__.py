"""
Audio streaming to the transcription service.
"""

from .stream_session import StreamSession, StreamConfig, SocketState, CLOSE_SESSION_MESSAGE

__all__ = ["StreamSession", "StreamConfig", "SocketState", "CLOSE_SESSION_MESSAGE"]
