"""
Expiry reaper Celery task.

Scheduled by celery beat every cleanup_interval_seconds; can also be sent
on demand by name.

Dependencies: celery, vecta.application, vecta.workers
System role: Periodic garbage collection of expired jobs
"""

import logging

from vecta.application.services.cleanup_service import CleanupService
from vecta.workers import CLEAN_EXPIRED_JOBS_TASK, celery_app
from vecta.workers.runtime import get_worker_storage, run_async, worker_session

logger = logging.getLogger(__name__)


async def _clean() -> int:
    async with worker_session() as db:
        return await CleanupService(db, get_worker_storage()).clean_expired_jobs()


@celery_app.task(name=CLEAN_EXPIRED_JOBS_TASK)
def clean_expired_jobs() -> dict:
    """Run one reaper pass."""
    cleaned = run_async(_clean())
    return {"cleaned": cleaned}
