"""
Custom exceptions for the Meeting Recorder.
"""

from enum import Enum
from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class MeetingRecorderException(Exception):
    """Base exception for Meeting Recorder errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ErrorKind(str, Enum):
    """How the scheduler treats a failed job attempt."""
    TERMINAL = "terminal"
    RETRYABLE = "retryable"


# Attempts allowed for errors that do not carry their own limit
DEFAULT_MAX_ATTEMPTS = 3


class JobError(MeetingRecorderException):
    """
    A job failure classified at the throw site.

    Terminal errors are never retried. Retryable errors are retried until
    ``max_attempts`` total attempts have been made (the scheduler applies its
    own global ceiling on top).
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.RETRYABLE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.kind = kind
        self.max_attempts = max_attempts
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def terminal(cls, message: str, cause: Optional[BaseException] = None, **details: Any) -> "JobError":
        return cls(message, ErrorKind.TERMINAL, max_attempts=1, cause=cause, details=details)

    @classmethod
    def retryable(
        cls,
        message: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        cause: Optional[BaseException] = None,
        **details: Any
    ) -> "JobError":
        return cls(message, ErrorKind.RETRYABLE, max_attempts=max_attempts, cause=cause, details=details)

    @property
    def retryable_error(self) -> bool:
        return self.kind == ErrorKind.RETRYABLE

    @property
    def error_type(self) -> str:
        return type(self).__name__


class CaptureError(JobError):
    """Raised when media capture cannot be started. Retryable."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        super().__init__(message, ErrorKind.RETRYABLE, max_attempts=max_attempts, cause=cause)


class UnsupportedStateError(JobError):
    """Raised when a job hits a state it can never recover from. Terminal."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, ErrorKind.TERMINAL, max_attempts=1, cause=cause)


class StreamSessionError(MeetingRecorderException):
    """Raised when the audio streaming session cannot be opened."""
    pass


class ConfigurationError(MeetingRecorderException):
    """Raised when configuration is invalid."""
    pass


def classify(error: BaseException) -> JobError:
    """
    Return the JobError view of any exception.

    Unclassified exceptions are treated as retryable with the default limit.
    """
    if isinstance(error, JobError):
        return error
    message = str(error) or type(error).__name__
    return JobError(message, ErrorKind.RETRYABLE, max_attempts=DEFAULT_MAX_ATTEMPTS, cause=error)


def get_error_type(error: BaseException) -> str:
    """Short error type label used in permanent failure log lines."""
    if isinstance(error, JobError):
        return error.error_type
    return type(error).__name__


# HTTP Exceptions for API responses
class HTTPBadRequest(HTTPException):
    """400 Bad Request"""
    def __init__(self, detail: Any):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class HTTPConflict(HTTPException):
    """409 Conflict"""
    def __init__(self, detail: Any = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class HTTPInternalServerError(HTTPException):
    """500 Internal Server Error"""
    def __init__(self, detail: Any = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
