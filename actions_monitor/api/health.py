"""
Health check endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from actions_monitor.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Simple API health check."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.APP_NAME,
    }
