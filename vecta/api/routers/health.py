"""
Health check API endpoint.

Routes: GET /health

Dependencies: vecta.application.services
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from vecta.api.deps import get_health_service
from vecta.application.services.health_service import HealthService


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    checks: dict[str, bool]


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(
    response: Response,
    health_service: HealthService = Depends(get_health_service),
) -> HealthResponse:
    """Check database, Redis and storage; 503 when any of them is down."""
    checks = await health_service.check()
    healthy = all(checks.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="ok" if healthy else "degraded", checks=checks)
