"""
Media capture collaborators.
"""

from .base import CaptureSource, CaptureStream, Chunk, SinkKind
from .playwright_capture import PlaywrightCaptureSource, PlaywrightCaptureStream

__all__ = [
    "CaptureSource",
    "CaptureStream",
    "Chunk",
    "SinkKind",
    "PlaywrightCaptureSource",
    "PlaywrightCaptureStream",
]
