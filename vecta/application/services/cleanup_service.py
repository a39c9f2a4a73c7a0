"""
Expiry reaper.

Deletes stored inputs/outputs of jobs past expires_at and moves them to
FAILED. The final transition is conditional, so overlapping runs both
delete (idempotent) but only one of them counts the job.

Dependencies: vecta.boundary
System role: Garbage collection of abandoned and finished jobs
"""

import asyncio
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.aws.s3_client import ObjectStorage
from vecta.boundary.db.base import utcnow
from vecta.boundary.db.CRUD import job_crud, job_file_crud
from vecta.core.exceptions import VectaError
from vecta.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class CleanupService:
    """Expires jobs and garbage-collects their storage objects."""

    def __init__(self, db: AsyncSession, storage: ObjectStorage) -> None:
        self.db = db
        self.storage = storage

    async def clean_expired_jobs(self, now: datetime | None = None) -> int:
        """
        Clean every expired job that is not already failed.

        A failure on one job is logged and the run continues with the next.

        Args:
            now: Reference time, defaults to the current UTC time

        Returns:
            int: Number of jobs this run moved to FAILED
        """
        now = now or utcnow()
        expired = await job_crud.get_expired(self.db, now)
        job_ids = [job.id for job in expired]
        await self.db.rollback()

        if not job_ids:
            logger.info("No expired jobs found")
            return 0

        logger.info("Found expired jobs", extra={"count": len(job_ids)})
        cleaned = 0
        for job_id in job_ids:
            try:
                if await self._clean_job(job_id):
                    cleaned += 1
            except (VectaError, SQLAlchemyError) as e:
                await self.db.rollback()
                log_exception_with_context(
                    logger,
                    "Failed to clean expired job",
                    e,
                    job_id=str(job_id),
                )

        logger.info("Cleanup finished", extra={"cleaned": cleaned, "total": len(job_ids)})
        return cleaned

    async def _clean_job(self, job_id) -> bool:
        keys = await job_file_crud.get_storage_keys(self.db, job_id)
        if keys:
            await asyncio.to_thread(self.storage.delete_many, keys)
            logger.info(
                "Deleted storage files",
                extra={"job_id": str(job_id), "deleted_keys": len(keys)},
            )

        marked = await job_crud.mark_expired(self.db, job_id)
        await self.db.commit()
        if marked is None:
            logger.info("Job already expired by another run", extra={"job_id": str(job_id)})
            return False

        logger.info("Job marked as expired", extra={"job_id": str(job_id)})
        return True
