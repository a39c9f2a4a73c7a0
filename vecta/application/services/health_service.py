"""
Dependency health checks.

Checks the database, Redis and the storage bucket concurrently. Each check
reports a boolean; a check never raises.

Dependencies: sqlalchemy, vecta.boundary
System role: Backing service for GET /health
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.aws.s3_client import ObjectStorage
from vecta.boundary.cache.usage_counter import UsageCounter

logger = logging.getLogger(__name__)


class HealthService:
    def __init__(self, db: AsyncSession, usage_counter: UsageCounter, storage: ObjectStorage) -> None:
        self.db = db
        self.usage_counter = usage_counter
        self.storage = storage

    async def check_database(self) -> bool:
        try:
            await self.db.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database health check failed", extra={"error": str(e)})
            return False

    async def check(self) -> dict[str, bool]:
        """
        Run all checks.

        Returns:
            dict[str, bool]: {"database": ..., "redis": ..., "storage": ...}
        """
        database, redis, storage = await asyncio.gather(
            self.check_database(),
            self.usage_counter.ping(),
            asyncio.to_thread(self.storage.check_bucket),
        )
        return {"database": database, "redis": redis, "storage": storage}
