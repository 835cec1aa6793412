"""
Health check and monitoring router.

Provides endpoints for liveness and readiness probes.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..dependencies import get_vehicle_service
from ..services.vehicle_service import VehicleRegistrationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=settings.APP_NAME,
        version=settings.VERSION,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    responses={503: {"description": "Repository unavailable"}},
)
async def readiness_check(
    service: VehicleRegistrationService = Depends(get_vehicle_service),
):
    """
    Readiness check.

    Returns 200 when the vehicle repository answers, 503 otherwise.
    """
    checks = service.describe()
    try:
        checks["vehicles"] = await service.repository.count()
        checks["repository_status"] = "healthy"
        ready = True
    except Exception as e:
        logger.warning("Readiness check failed", error=str(e))
        checks["repository_status"] = "unhealthy"
        ready = False

    response = ReadinessResponse(
        ready=ready, checks=checks, timestamp=datetime.now(timezone.utc).isoformat()
    )
    if not ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )
    return response
