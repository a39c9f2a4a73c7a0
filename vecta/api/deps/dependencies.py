"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived clients (S3, Celery
producer, Redis) are cached per process; services are built per request
around the request-scoped database session.

Dependencies: vecta.configs, vecta.application, vecta.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.application.services import (
    CleanupService,
    HealthService,
    JobService,
    StatsService,
    UsageLimitService,
)
from vecta.boundary.aws.s3_client import ObjectStorage
from vecta.boundary.cache.usage_counter import UsageCounter
from vecta.boundary.db import get_async_db
from vecta.boundary.queue.conversion_queue import ConversionQueue
from vecta.configs import Settings, get_settings


class ServiceCache:
    """Container for cached client instances."""

    def __init__(self):
        self._storage = None
        self._queue = None
        self._usage_counter = None

    @property
    def storage(self) -> ObjectStorage:
        """Get cached object storage client."""
        if self._storage is None:
            from vecta.boundary.aws.s3_client import build_object_storage

            self._storage = build_object_storage(get_settings().storage)
        return self._storage

    @property
    def queue(self) -> ConversionQueue:
        """Get cached conversion queue producer."""
        if self._queue is None:
            from vecta.workers import celery_app

            self._queue = ConversionQueue(celery_app, get_settings().queue.queue_name)
        return self._queue

    @property
    def usage_counter(self) -> UsageCounter:
        """Get cached Redis usage counter."""
        if self._usage_counter is None:
            from vecta.boundary.cache.usage_counter import build_usage_counter

            self._usage_counter = build_usage_counter(get_settings().redis)
        return self._usage_counter

    async def aclose(self) -> None:
        """Close open connections and clear all cached instances."""
        if self._usage_counter is not None:
            await self._usage_counter.close()
        self._storage = None
        self._queue = None
        self._usage_counter = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_object_storage() -> ObjectStorage:
    return get_service_cache().storage


def get_conversion_queue() -> ConversionQueue:
    return get_service_cache().queue


def get_usage_counter() -> UsageCounter:
    return get_service_cache().usage_counter


def get_job_service(
    db: AsyncSession = Depends(get_async_db),
    storage: ObjectStorage = Depends(get_object_storage),
    queue: ConversionQueue = Depends(get_conversion_queue),
    usage_counter: UsageCounter = Depends(get_usage_counter),
    settings: Settings = Depends(get_settings_dependency),
) -> JobService:
    """
    Get job service instance.

    Args:
        db: Async database session (injected via Depends)
        storage: Object storage client
        queue: Conversion task producer
        usage_counter: Daily usage counter
        settings: Application settings

    Returns:
        JobService: Job service instance
    """
    return JobService(
        db=db,
        storage=storage,
        queue=queue,
        usage_counter=usage_counter,
        settings=settings,
    )


def get_usage_limit_service(
    usage_counter: UsageCounter = Depends(get_usage_counter),
    settings: Settings = Depends(get_settings_dependency),
) -> UsageLimitService:
    return UsageLimitService(usage_counter=usage_counter, limits=settings.limits)


def get_health_service(
    db: AsyncSession = Depends(get_async_db),
    usage_counter: UsageCounter = Depends(get_usage_counter),
    storage: ObjectStorage = Depends(get_object_storage),
) -> HealthService:
    return HealthService(db=db, usage_counter=usage_counter, storage=storage)


def get_cleanup_service(
    db: AsyncSession = Depends(get_async_db),
    storage: ObjectStorage = Depends(get_object_storage),
) -> CleanupService:
    return CleanupService(db=db, storage=storage)


def get_stats_service(db: AsyncSession = Depends(get_async_db)) -> StatsService:
    return StatsService(db=db)
