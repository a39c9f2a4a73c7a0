"""
Admin statistics queries.

Read-only aggregates over jobs, job files and analytics events. Counts use
COUNT(CASE ...) and hourly buckets are built in Python so the same queries
run on PostgreSQL and SQLite.

Dependencies: sqlalchemy, vecta.boundary.db.models
System role: Aggregate reads behind GET /admin/stats
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.db.models import (
    CONVERSION_COMPLETED,
    AnalyticsEventModel,
    FileStatus,
    JobFileModel,
    JobModel,
    JobStatus,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StatsCRUD:
    """Aggregate queries for the admin dashboard."""

    async def get_conversion_counts(self, session: AsyncSession, now: datetime) -> dict[str, int]:
        """
        Jobs created in the last day, week and month, plus all time.

        Args:
            session: Async database session
            now: Reference time (UTC)

        Returns:
            dict: {"today", "week", "month", "total"}
        """
        windows = {"today": 1, "week": 7, "month": 30}
        columns = [
            func.count(case((JobModel.created_at >= now - timedelta(days=days), JobModel.id))).label(name)
            for name, days in windows.items()
        ]
        stmt = select(*columns, func.count(JobModel.id).label("total"))
        row = (await session.execute(stmt)).one()
        return {name: int(getattr(row, name) or 0) for name in (*windows, "total")}

    async def get_bytes_processed(self, session: AsyncSession) -> dict[str, int]:
        """Input and output bytes of completed files."""
        stmt = select(
            func.coalesce(func.sum(JobFileModel.original_size), 0),
            func.coalesce(func.sum(JobFileModel.converted_size), 0),
        ).where(JobFileModel.status == FileStatus.COMPLETED)
        total_input, total_output = (await session.execute(stmt)).one()
        return {"total_input": int(total_input), "total_output": int(total_output)}

    async def get_format_distribution(self, session: AsyncSession) -> list[dict]:
        """Jobs per output format, most used first."""
        count = func.count(JobModel.id).label("count")
        stmt = select(JobModel.output_format, count).group_by(JobModel.output_format)
        rows = (await session.execute(stmt)).all()
        distribution = [{"format": output_format.value, "count": int(n)} for output_format, n in rows]
        return sorted(distribution, key=lambda row: (-row["count"], row["format"]))

    async def get_hourly_conversions(self, session: AsyncSession, now: datetime) -> list[dict]:
        """
        Jobs created per hour over the last 24 hours.

        Only hours with at least one job are returned, oldest first.
        """
        stmt = select(JobModel.created_at).where(JobModel.created_at >= now - timedelta(hours=24))
        buckets: dict[datetime, int] = {}
        for created_at in (await session.execute(stmt)).scalars():
            hour = _as_utc(created_at).replace(minute=0, second=0, microsecond=0)
            buckets[hour] = buckets.get(hour, 0) + 1
        return [{"hour": hour, "count": buckets[hour]} for hour in sorted(buckets)]

    async def get_error_rate(self, session: AsyncSession) -> dict[str, int]:
        """Finished jobs and how many of them ended failed."""
        stmt = select(
            func.count(JobModel.id),
            func.count(case((JobModel.status == JobStatus.FAILED, JobModel.id))),
        ).where(JobModel.status.in_([JobStatus.COMPLETED, JobStatus.FAILED]))
        total, failed = (await session.execute(stmt)).one()
        return {"total": int(total), "failed": int(failed)}

    async def get_conversion_performance(self, session: AsyncSession) -> dict:
        """Event count, mean savings and mean duration of successful conversions."""
        stmt = select(
            func.count(AnalyticsEventModel.id),
            func.avg(AnalyticsEventModel.savings_percent),
            func.avg(AnalyticsEventModel.duration_ms),
        ).where(AnalyticsEventModel.event_type == CONVERSION_COMPLETED)
        events, avg_savings, avg_duration = (await session.execute(stmt)).one()
        return {
            "events": int(events),
            "avg_savings_percent": round(float(avg_savings), 1) if avg_savings is not None else None,
            "avg_duration_ms": round(float(avg_duration)) if avg_duration is not None else None,
        }


stats_crud = StatsCRUD()
