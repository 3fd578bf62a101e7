"""
FastAPI application initialization for the Meeting Recorder.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from meeting_recorder.config import settings, get_logger
from meeting_recorder.api.router import api_router
from meeting_recorder.bot import MeetingRecorderBot
from meeting_recorder.scheduler import JobScheduler

logger = get_logger("api")


def create_app(
    scheduler: Optional[JobScheduler] = None,
    bot: Optional[MeetingRecorderBot] = None
) -> FastAPI:
    """
    Build the API application.

    Args:
        scheduler: Scheduler instance (created on startup when omitted)
        bot: Bot instance bound to the scheduler (created on startup when omitted)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Meeting Recorder API...")
        app.state.started_monotonic = time.monotonic()
        app.state.scheduler = scheduler or JobScheduler()
        app.state.bot = bot or MeetingRecorderBot(app.state.scheduler)
        logger.info("Meeting Recorder API started successfully")

        yield

        logger.info("Shutting down Meeting Recorder API...")
        app.state.scheduler.request_shutdown()
        await app.state.scheduler.wait_for_completion()
        logger.info("Meeting Recorder API shutdown complete")

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="Single-job meeting recorder with live audio streaming",
        lifespan=lifespan,
    )
    app.include_router(api_router)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        # Endpoints raise with the response envelope as detail
        content = exc.detail if isinstance(exc.detail, dict) else {"success": False, "error": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    return app
