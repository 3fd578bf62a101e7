"""
Google Meet recording endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from meeting_recorder.api.dependencies import BotDep
from meeting_recorder.api.schemas import JoinRequest
from meeting_recorder.bot import MeetingRecorderBot
from meeting_recorder.config import job_logger
from meeting_recorder.core.exceptions import HTTPBadRequest, HTTPConflict
from meeting_recorder.models import MeetingProvider, MeetingRequest

router = APIRouter()


@router.post("/join", tags=["Meetings"])
async def join_google_meet(body: JoinRequest, bot: MeetingRecorderBot = BotDep) -> JSONResponse:
    """
    Join and record a Google Meet meeting.

    Returns 202 when the job was admitted, 409 when a recording is already running.
    """
    missing = body.missing_fields()
    if missing:
        raise HTTPBadRequest({"success": False, "error": f"Missing required fields: {', '.join(missing)}"})
    if not body.bot_id and not body.event_id:
        raise HTTPBadRequest({"success": False, "error": "Missing required fields: botId or eventId"})

    request = MeetingRequest(
        url=body.url,
        name=body.name,
        user_id=body.user_id,
        team_id=body.team_id,
        bearer_token=body.bearer_token,
        timezone=body.timezone,
        provider=MeetingProvider.GOOGLE,
        bot_id=body.bot_id,
        event_id=body.event_id,
        audio_session_id=body.audio_session_id,
    )
    log = job_logger("api.google", **request.log_context)

    result = bot.submit(request)
    if not result.accepted:
        log.info("Rejected join request, recorder is busy")
        raise HTTPConflict({
            "success": False,
            "error": "Another meeting is currently being processed. Please try again later.",
            "data": body.reference(),
        })

    log.info("Google Meet job accepted and started processing")
    return JSONResponse(status_code=202, content={
        "success": True,
        "message": "Google Meet join request accepted and processing started",
        "data": {**body.reference(), "status": "processing"},
    })
