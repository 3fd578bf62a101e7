"""
Logging configuration for the Meeting Recorder.
Provides colored console output, file rotation and per-job context adapters.
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime
from typing import Any, Dict, Optional

from .settings import settings


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for console output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[41m",  # Red background
        "RESET": "\033[0m"       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        # Color a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{reset}"

        return super().format(record)


class JobLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the job's correlation fields."""

    def process(self, msg, kwargs):
        context = " ".join(f"{key}={value}" for key, value in self.extra.items() if value)
        if context:
            msg = f"[{context}] {msg}"
        return msg, kwargs


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_file_logging: Optional[bool] = None
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        log_level: Override log level from settings
        log_file: Override log file path
        enable_file_logging: Whether to enable file logging (defaults to settings)

    Returns:
        Configured logger instance
    """
    level = log_level or settings.log_level
    if enable_file_logging is None:
        enable_file_logging = settings.log_to_file

    logger = logging.getLogger("meeting_recorder")
    logger.setLevel(getattr(logging, level))

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler with colors
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level))
    console_format = ColoredFormatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # File handler with rotation
    if enable_file_logging:
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)
        log_filename = log_file or f"logs/meeting_recorder_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = RotatingFileHandler(
            log_filename,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(getattr(logging, level))
        file_format = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger with the given name.

    Args:
        name: Logger name (will be prefixed with 'meeting_recorder.')

    Returns:
        Logger instance
    """
    return logging.getLogger(f"meeting_recorder.{name}")


def job_logger(name: str, **context: Any) -> JobLoggerAdapter:
    """
    Get a logger carrying a job's correlation fields (user, team, bot...).

    Args:
        name: Child logger name
        **context: Correlation fields; empty values are omitted from output

    Returns:
        Logger adapter bound to the context
    """
    extra: Dict[str, Any] = {key: value for key, value in context.items()}
    return JobLoggerAdapter(get_logger(name), extra)
