"""
Analytics event CRUD operations.

Dependencies: sqlalchemy, vecta.boundary.db.models
System role: Conversion analytics persistence
"""

from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.db.CRUD.base_crud import BaseCRUD
from vecta.boundary.db.models.analytics_event_model import (
    CONVERSION_COMPLETED,
    AnalyticsEventModel,
)


class AnalyticsCRUD(BaseCRUD[AnalyticsEventModel]):
    """Append-only writes for analytics events."""

    def __init__(self) -> None:
        super().__init__(AnalyticsEventModel)

    async def log_conversion_event(
        self,
        session: AsyncSession,
        *,
        input_format: str | None,
        output_format: str,
        input_size: int,
        output_size: int,
        savings_percent: float,
        duration_ms: int,
        quality: int,
    ) -> AnalyticsEventModel:
        return await self.create(
            session,
            event_type=CONVERSION_COMPLETED,
            input_format=input_format,
            output_format=output_format,
            input_size=input_size,
            output_size=output_size,
            savings_percent=savings_percent,
            duration_ms=duration_ms,
            quality=quality,
        )


analytics_crud = AnalyticsCRUD()
