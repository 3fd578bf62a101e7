"""
Recording module - orchestration, sinks and inactivity detection.
"""

from .detectors import InactivityState, PresenceDetector, SilenceDetector, frequency_energy
from .orchestrator import RecordingOrchestrator, RecordingParams, RecordingResult, StopReason
from .sinks import FileVideoSink, VideoSink, recording_name

__all__ = [
    "InactivityState",
    "PresenceDetector",
    "SilenceDetector",
    "frequency_energy",
    "RecordingOrchestrator",
    "RecordingParams",
    "RecordingResult",
    "StopReason",
    "FileVideoSink",
    "VideoSink",
    "recording_name",
]
