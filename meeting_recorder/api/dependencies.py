"""
Dependency injection for the API.
The scheduler and bot are created by the application lifespan and kept on app.state.
"""

from fastapi import Depends, Request

from meeting_recorder.bot import MeetingRecorderBot
from meeting_recorder.core.exceptions import HTTPInternalServerError
from meeting_recorder.scheduler import JobScheduler


def get_scheduler(request: Request) -> JobScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPInternalServerError("Job scheduler not initialized")
    return scheduler


def get_bot(request: Request) -> MeetingRecorderBot:
    bot = getattr(request.app.state, "bot", None)
    if bot is None:
        raise HTTPInternalServerError("Meeting recorder bot not initialized")
    return bot


SchedulerDep = Depends(get_scheduler)
BotDep = Depends(get_bot)
