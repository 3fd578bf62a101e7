"""
Data models for recording requests.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from enum import Enum


class MeetingProvider(str, Enum):
    """Supported meeting providers."""
    GOOGLE = "google"


@dataclass
class MeetingRequest:
    """
    A request to join and record one meeting.
    """
    url: str
    name: str
    user_id: str
    team_id: str
    bearer_token: str
    timezone: str
    provider: MeetingProvider = MeetingProvider.GOOGLE

    # Optional fields
    bot_id: Optional[str] = None
    event_id: Optional[str] = None
    audio_session_id: Optional[str] = None

    # Tracking fields
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    received_at: datetime = field(default_factory=datetime.now)

    @property
    def recording_id(self) -> str:
        """Directory-safe identifier for this recording."""
        base = self.bot_id or self.event_id or self.request_id
        safe = "".join(c for c in base if c.isalnum() or c in ("-", "_"))
        return f"{safe}_{int(self.received_at.timestamp())}"

    @property
    def log_context(self) -> dict:
        """Correlation fields attached to every log line of the job."""
        return {
            "userId": self.user_id,
            "teamId": self.team_id,
            "botId": self.bot_id,
            "eventId": self.event_id,
        }
