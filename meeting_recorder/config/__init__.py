"""
Configuration module for the Meeting Recorder.
"""

from .settings import (
    Settings,
    settings,
    AudioStreamingSettings,
    RecordingSettings,
    SchedulerSettings,
    BrowserSettings,
    ServerSettings,
    WebhookSettings,
)
from .logger import get_logger, job_logger, setup_logging, JobLoggerAdapter

__all__ = [
    "Settings",
    "settings",
    "AudioStreamingSettings",
    "RecordingSettings",
    "SchedulerSettings",
    "BrowserSettings",
    "ServerSettings",
    "WebhookSettings",
    "get_logger",
    "job_logger",
    "setup_logging",
    "JobLoggerAdapter",
]
