"""
Health Check Endpoints
"""

from datetime import datetime
from typing import Dict

from fastapi import APIRouter
from pydantic import BaseModel

from arr_analytics.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Application status; the engine has no external dependencies to check."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.utcnow(),
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness check"""
    return {"status": "alive"}
