"""
Admin statistics.

Collects the dashboard aggregates in one read-only pass over the job store.

Dependencies: vecta.boundary.db
System role: Backing service for GET /admin/stats
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.db.base import utcnow
from vecta.boundary.db.CRUD import stats_crud
from vecta.models.stats import (
    BytesProcessed,
    ConversionCounts,
    ConversionPerformance,
    ErrorRate,
    FormatCount,
    HourlyCount,
    StatsResponse,
)

logger = logging.getLogger(__name__)


class StatsService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_stats(self, now: datetime | None = None) -> StatsResponse:
        """
        Build the admin statistics snapshot.

        Args:
            now: Reference time for the rolling windows, defaults to current UTC time

        Returns:
            StatsResponse: Conversion counts, bytes, formats, hourly series,
            error rate and conversion performance
        """
        now = now or utcnow()
        counts = await stats_crud.get_conversion_counts(self.db, now)
        bytes_processed = await stats_crud.get_bytes_processed(self.db)
        formats = await stats_crud.get_format_distribution(self.db)
        hourly = await stats_crud.get_hourly_conversions(self.db, now)
        error_rate = await stats_crud.get_error_rate(self.db)
        performance = await stats_crud.get_conversion_performance(self.db)

        logger.info("Admin stats computed", extra={"total_jobs": counts["total"]})
        return StatsResponse(
            conversions=ConversionCounts(**counts),
            bytes=BytesProcessed(**bytes_processed),
            formats=[FormatCount(**row) for row in formats],
            hourly=[HourlyCount(**row) for row in hourly],
            error_rate=ErrorRate(**error_rate),
            performance=ConversionPerformance(**performance),
        )
