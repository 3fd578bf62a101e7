"""
Health check and availability endpoints.
"""

import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request

from meeting_recorder.api.dependencies import SchedulerDep
from meeting_recorder.api.schemas import ApiResponse, HealthCheckResponse
from meeting_recorder.scheduler import JobScheduler

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse, tags=["Health"])
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status with timestamp and process uptime (seconds)
    """
    started = getattr(request.app.state, "started_monotonic", time.monotonic())
    return {
        "status": "healthy",
        "timestamp": datetime.now(),
        "uptime": time.monotonic() - started,
    }


@router.get("/isbusy", response_model=ApiResponse, response_model_exclude_none=True, tags=["Health"])
async def is_busy(scheduler: JobScheduler = SchedulerDep) -> Dict[str, Any]:
    """
    Availability of this recorder.

    Returns:
        data=1 while a recording job is admitted, 0 otherwise
    """
    return {"success": True, "data": 1 if scheduler.is_busy() else 0}
