"""
Configuration settings for the Meeting Recorder.
Scheduler, recording, audio streaming, browser and server settings.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AudioStreamingSettings(BaseSettings):
    """Audio streaming to the transcription service."""
    model_config = SettingsConfigDict(env_prefix="AUDIO_STREAMING_", env_file=".env", extra="ignore")

    enabled: bool = Field(default=False, description="Stream audio chunks over WebSocket")
    ws_endpoint: str = Field(
        default="ws://localhost:8000/api/ws/audio",
        description="WebSocket endpoint of the transcription service"
    )
    sample_rate: int = Field(default=44100, description="Audio sample rate (Hz)")
    channels: int = Field(default=1, description="Audio channel count")
    format: str = Field(default="wav", description="Audio format announced to the service")
    chunk_duration_ms: int = Field(default=1000, description="Audio chunk interval (ms)")
    connect_timeout_seconds: float = Field(default=10.0, description="WebSocket open timeout")


class RecordingSettings(BaseSettings):
    """Recording and inactivity detection configuration."""
    model_config = SettingsConfigDict(env_prefix="RECORDING_", env_file=".env", extra="ignore")

    max_recording_duration_minutes: float = Field(default=180, description="Upper limit on recording length")
    inactivity_limit_minutes: float = Field(default=0.5, description="Silence allowed before stopping")
    activate_inactivity_detection_after_minutes: float = Field(
        default=0.5, description="Grace period before inactivity detection starts"
    )

    video_chunk_duration_ms: int = Field(default=2000, description="Video chunk interval (ms)")
    presence_check_interval_ms: int = Field(default=2000, description="Participant count poll interval")
    silence_check_interval_ms: int = Field(default=100, description="Audio energy sample interval")
    silence_threshold: float = Field(default=10.0, description="Energy below this counts as silence")
    min_participants: int = Field(default=2, description="Stop when fewer participants remain")
    teardown_grace_seconds: float = Field(default=12.0, description="Extra wait past max duration")

    local_path: str = Field(default="recordings", description="Local recordings directory")


class SchedulerSettings(BaseSettings):
    """Job admission and retry configuration."""
    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", env_file=".env", extra="ignore")

    max_attempts: int = Field(default=3, description="Hard ceiling on attempts per job")
    retry_backoff_seconds: float = Field(default=30.0, description="Linear backoff step between attempts")
    completion_poll_interval_seconds: float = Field(default=1.0, description="Shutdown drain poll interval")


class BrowserSettings(BaseSettings):
    """Browser automation configuration."""
    model_config = SettingsConfigDict(env_prefix="BROWSER_", env_file=".env", extra="ignore")

    headless: bool = Field(default=True, description="Run Chromium headless")
    executable_path: Optional[str] = Field(default=None, description="Custom Chrome executable")
    join_wait_seconds: float = Field(default=10.0, description="Time allowed for the page to settle")


class ServerSettings(BaseSettings):
    """HTTP server configuration."""
    model_config = SettingsConfigDict(env_prefix="SERVER_", env_file=".env", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")


class WebhookSettings(BaseSettings):
    """Completion webhook configuration."""
    model_config = SettingsConfigDict(env_prefix="WEBHOOK_", env_file=".env", extra="ignore")

    url: Optional[str] = Field(default=None, description="Status webhook URL")
    timeout_seconds: float = Field(default=30.0, description="Webhook request timeout")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    # Nested settings
    audio_streaming: AudioStreamingSettings = Field(default_factory=AudioStreamingSettings)
    recording: RecordingSettings = Field(default_factory=RecordingSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    # Application settings
    project_name: str = Field(default="Meeting Recorder", description="Service name")
    version: str = Field(default="1.0.0", description="Service version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Write rotating log files under logs/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def max_recording_duration_ms(self) -> int:
        """Maximum recording duration in milliseconds."""
        return int(self.recording.max_recording_duration_minutes * 60 * 1000)

    @property
    def inactivity_limit_ms(self) -> int:
        """Inactivity limit in milliseconds."""
        return int(self.recording.inactivity_limit_minutes * 60 * 1000)

    @property
    def grace_period_ms(self) -> int:
        """Delay before inactivity detectors start sampling."""
        return int(self.recording.activate_inactivity_detection_after_minutes * 60 * 1000)


# Global settings instance
settings = Settings()
