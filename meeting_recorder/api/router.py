"""
API router aggregation.
"""

from fastapi import APIRouter
from meeting_recorder.api.endpoints import health, google

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(google.router, prefix="/google", tags=["Meetings"])

__all__ = ["api_router"]
