"""
Core building blocks: errors, timers and the task base class.
"""

from .exceptions import (
    MeetingRecorderException,
    ErrorKind,
    JobError,
    CaptureError,
    UnsupportedStateError,
    StreamSessionError,
    ConfigurationError,
    classify,
    get_error_type,
)
from .task import Task
from .timers import Ticker, Timer

__all__ = [
    "MeetingRecorderException",
    "ErrorKind",
    "JobError",
    "CaptureError",
    "UnsupportedStateError",
    "StreamSessionError",
    "ConfigurationError",
    "classify",
    "get_error_type",
    "Task",
    "Ticker",
    "Timer",
]
