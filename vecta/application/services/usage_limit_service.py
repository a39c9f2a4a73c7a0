"""
Usage limit service.

Reports a session's daily usage against the configured limits.

Dependencies: vecta.boundary.cache
System role: Backing service for GET /limits
"""

from vecta.boundary.cache.usage_counter import UsageCounter
from vecta.configs.limits import LimitsSettings
from vecta.models.limits import LimitsResponse


class UsageLimitService:
    def __init__(self, usage_counter: UsageCounter, limits: LimitsSettings) -> None:
        self.usage_counter = usage_counter
        self.limits = limits

    async def get_limits(self, session_token: str) -> LimitsResponse:
        used = await self.usage_counter.get(session_token)
        return LimitsResponse(
            used=used,
            max_conversions_per_day=self.limits.max_conversions_per_day,
            max_file_size=self.limits.max_file_size,
            max_files_per_job=self.limits.max_files_per_job,
        )
