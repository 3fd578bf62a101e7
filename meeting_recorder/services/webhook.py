"""
Status webhook - reports the final outcome of a recording job.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Union

import httpx
from pydantic import BaseModel, Field

from meeting_recorder.config import settings, get_logger, WebhookSettings

logger = get_logger("webhook")

ReporterLogger = Union[logging.Logger, logging.LoggerAdapter]


class WebhookPayload(BaseModel):
    """Body of the status webhook."""
    status: Literal["completed", "failed"]
    user_id: str = Field(serialization_alias="userId")
    team_id: str = Field(serialization_alias="teamId")
    meeting_url: str = Field(serialization_alias="meetingUrl")
    bot_id: Optional[str] = Field(default=None, serialization_alias="botId")
    event_id: Optional[str] = Field(default=None, serialization_alias="eventId")
    error: Optional[str] = None
    stop_reason: Optional[str] = Field(default=None, serialization_alias="stopReason")
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class StatusReporter:
    """Posts job outcomes to the configured webhook. Never raises."""

    def __init__(
        self,
        webhook_settings: Optional[WebhookSettings] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self._settings = webhook_settings or settings.webhook
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self._settings.url)

    async def report(
        self,
        payload: WebhookPayload,
        bearer_token: Optional[str] = None,
        reporter_logger: Optional[ReporterLogger] = None
    ) -> bool:
        """
        Send one status update.

        Returns:
            True when the webhook answered with a 2xx status
        """
        log = reporter_logger or logger
        if not self.enabled:
            log.debug("No webhook configured, skipping status report")
            return False

        headers = {"Content-Type": "application/json"}
        if bearer_token:
            headers["Authorization"] = f"Bearer {bearer_token}"

        log.info(f"WEBHOOK: Reporting status '{payload.status}' to {self._settings.url}")
        try:
            if self._client is not None:
                response = await self._client.post(self._settings.url, json=payload.to_json(), headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
                    response = await client.post(self._settings.url, json=payload.to_json(), headers=headers)
        except httpx.TimeoutException:
            log.error(f"WEBHOOK: Request timeout ({self._settings.url})")
            return False
        except httpx.HTTPError as e:
            log.error(f"WEBHOOK: Call failed: {e}")
            return False

        if 200 <= response.status_code < 300:
            log.info(f"WEBHOOK: Call completed successfully ({response.status_code})")
            return True

        log.error(f"WEBHOOK: Unexpected status code {response.status_code}: {response.text[:200]}")
        return False
