"""
Admin API endpoints.

Routes:
- GET /admin/stats - Conversion statistics for the dashboard
- POST /admin/cleanup - Run one expiry reaper pass now

Every route requires the X-Admin-Key header to match ADMIN_KEY; when no
key is configured the routes are closed.

Dependencies: vecta.application.services, vecta.configs
System role: Operator HTTP API
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from vecta.api.deps import get_cleanup_service, get_settings_dependency, get_stats_service
from vecta.application.services.cleanup_service import CleanupService
from vecta.application.services.stats_service import StatsService
from vecta.configs import Settings
from vecta.models.common import SuccessResponse
from vecta.models.stats import StatsResponse

from .jobs.job_error_handling import error_detail, handle_job_errors

logger = logging.getLogger(__name__)


def require_admin_key(
    x_admin_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings_dependency),
) -> None:
    """
    Reject requests without the configured admin key.

    Raises:
        HTTPException(401): Key missing, wrong, or admin access not configured
    """
    expected = settings.admin_key
    if not expected or not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        logger.warning("Admin request rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("UNAUTHORIZED", "Invalid admin key"),
        )


class CleanupResult(BaseModel):
    cleaned: int


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_key)])


@router.get("/stats", response_model=SuccessResponse[StatsResponse])
@handle_job_errors
async def get_stats(
    stats_service: StatsService = Depends(get_stats_service),
) -> SuccessResponse[StatsResponse]:
    """Conversion counts, bytes processed, formats, hourly series and error rate."""
    stats = await stats_service.get_stats()
    return SuccessResponse(data=stats)


@router.post("/cleanup", response_model=SuccessResponse[CleanupResult])
@handle_job_errors
async def run_cleanup(
    cleanup_service: CleanupService = Depends(get_cleanup_service),
) -> SuccessResponse[CleanupResult]:
    """Expire and garbage-collect jobs past expires_at without waiting for beat."""
    cleaned = await cleanup_service.clean_expired_jobs()
    return SuccessResponse(data=CleanupResult(cleaned=cleaned))
