"""
Tests for the HTTP API.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from meeting_recorder.api import create_app
from meeting_recorder.scheduler import AddJobResult

JOIN_BODY = {
    "bearerToken": "token-123",
    "url": "https://meet.google.com/abc-defg-hij",
    "name": "Recorder",
    "teamId": "team-1",
    "timezone": "UTC",
    "userId": "user-1",
    "botId": "bot-9",
}


@pytest.fixture
def scheduler():
    scheduler = MagicMock()
    scheduler.is_busy.return_value = False
    scheduler.wait_for_completion = AsyncMock()
    return scheduler


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.submit.return_value = AddJobResult(accepted=True)
    return bot


@pytest.fixture
def client(scheduler, bot):
    with TestClient(create_app(scheduler=scheduler, bot=bot)) as client:
        yield client


class TestHealth:
    """Tests for health and availability endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["uptime"] >= 0

    def test_idle(self, client):
        response = client.get("/isbusy")
        assert response.json() == {"success": True, "data": 0}

    def test_busy(self, client, scheduler):
        scheduler.is_busy.return_value = True
        response = client.get("/isbusy")
        assert response.json() == {"success": True, "data": 1}


class TestJoin:
    """Tests for POST /google/join."""

    def test_accepted(self, client, bot):
        response = client.post("/google/join", json=JOIN_BODY)

        assert response.status_code == 202
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "processing"
        assert body["data"]["botId"] == "bot-9"

        request = bot.submit.call_args.args[0]
        assert request.url == JOIN_BODY["url"]
        assert request.user_id == "user-1"
        assert request.bearer_token == "token-123"

    def test_busy_returns_conflict(self, client, bot):
        bot.submit.return_value = AddJobResult(accepted=False)

        response = client.post("/google/join", json=JOIN_BODY)

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["data"]["userId"] == "user-1"

    @pytest.mark.parametrize("field", ["bearerToken", "url", "name", "teamId", "timezone", "userId"])
    def test_missing_field(self, client, bot, field):
        body = {k: v for k, v in JOIN_BODY.items() if k != field}

        response = client.post("/google/join", json=body)

        assert response.status_code == 400
        assert field in response.json()["error"]
        bot.submit.assert_not_called()

    def test_requires_bot_or_event_id(self, client, bot):
        body = {k: v for k, v in JOIN_BODY.items() if k != "botId"}

        response = client.post("/google/join", json=body)

        assert response.status_code == 400
        bot.submit.assert_not_called()

    def test_event_id_is_enough(self, client, bot):
        body = {k: v for k, v in JOIN_BODY.items() if k != "botId"}
        body["eventId"] = "event-5"

        response = client.post("/google/join", json=body)

        assert response.status_code == 202
        assert bot.submit.call_args.args[0].event_id == "event-5"


class TestLifespan:
    """Tests for startup and shutdown."""

    def test_shutdown_drains_scheduler(self, scheduler, bot):
        with TestClient(create_app(scheduler=scheduler, bot=bot)):
            scheduler.request_shutdown.assert_not_called()

        scheduler.request_shutdown.assert_called_once()
        scheduler.wait_for_completion.assert_awaited_once()
