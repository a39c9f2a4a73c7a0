"""
Usage limits API endpoint.

Routes: GET /limits

Dependencies: vecta.application.services
System role: Lets clients show remaining daily conversions
"""

from fastapi import APIRouter, Depends

from vecta.api.deps import get_session_token, get_usage_limit_service
from vecta.application.services.usage_limit_service import UsageLimitService
from vecta.models.common import SuccessResponse
from vecta.models.limits import LimitsResponse

from .jobs.job_error_handling import handle_job_errors

router = APIRouter(prefix="/limits", tags=["limits"])


@router.get("", response_model=SuccessResponse[LimitsResponse])
@handle_job_errors
async def get_limits(
    session_token: str = Depends(get_session_token),
    usage_limit_service: UsageLimitService = Depends(get_usage_limit_service),
) -> SuccessResponse[LimitsResponse]:
    """Daily usage for this session and the configured limits."""
    limits = await usage_limit_service.get_limits(session_token)
    return SuccessResponse(data=limits)
