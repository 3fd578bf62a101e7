"""
Background tasks.
"""

from .recording_task import RecordingTask

__all__ = ["RecordingTask"]
