"""
API request/response schemas.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class JoinRequest(BaseModel):
    """Request to join and record a meeting."""
    model_config = ConfigDict(populate_by_name=True)

    bearer_token: Optional[str] = Field(default=None, alias="bearerToken")
    url: Optional[str] = Field(default=None, description="Meeting URL to join")
    name: Optional[str] = Field(default=None, description="Display name for the bot")
    team_id: Optional[str] = Field(default=None, alias="teamId")
    timezone: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    bot_id: Optional[str] = Field(default=None, alias="botId")
    event_id: Optional[str] = Field(default=None, alias="eventId")
    audio_session_id: Optional[str] = Field(default=None, alias="audioSessionId")

    def missing_fields(self) -> list:
        required = {
            "bearerToken": self.bearer_token,
            "url": self.url,
            "name": self.name,
            "teamId": self.team_id,
            "timezone": self.timezone,
            "userId": self.user_id,
        }
        return [key for key, value in required.items() if not value]

    def reference(self) -> Dict[str, Optional[str]]:
        return {
            "userId": self.user_id,
            "teamId": self.team_id,
            "eventId": self.event_id,
            "botId": self.bot_id,
        }


class ApiResponse(BaseModel):
    """Envelope used by every endpoint."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    data: Optional[Any] = None


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime
    uptime: float
