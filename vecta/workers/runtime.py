"""
Per-process async runtime for Celery worker children.

Celery tasks are synchronous; each prefork child keeps one event loop for
its whole life and runs task coroutines on it, so the async engine's
connection pool stays bound to a single loop. The engine and storage client
are created lazily in the child, never inherited across fork.

Dependencies: celery, sqlalchemy, vecta.boundary
System role: Bridge between Celery's sync tasks and the async service layer
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator, Awaitable, TypeVar

from celery.signals import worker_process_init, worker_process_shutdown
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.aws.s3_client import ObjectStorage, build_object_storage
from vecta.boundary.db.connection import get_async_engine, get_async_session_factory
from vecta.configs import get_settings
from vecta.observability import configure_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

_loop: asyncio.AbstractEventLoop | None = None


def get_worker_loop() -> asyncio.AbstractEventLoop:
    """The child's event loop, created on first use."""
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
    return _loop


def run_async(coro: Awaitable[T]) -> T:
    """
    Run a coroutine to completion on the child's event loop.

    When run_until_complete is interrupted (SoftTimeLimitExceeded is raised
    from a signal handler while the loop waits) the task is cancelled and
    drained before re-raising, so nothing from this call resumes during the
    next one and its database session is released.
    """
    loop = get_worker_loop()
    task = loop.create_task(coro)
    try:
        return loop.run_until_complete(task)
    except BaseException:
        if not task.done():
            task.cancel()
            loop.run_until_complete(asyncio.gather(task, return_exceptions=True))
            logger.warning("Cancelled interrupted worker coroutine")
        raise


@lru_cache
def get_worker_storage() -> ObjectStorage:
    return build_object_storage(get_settings().storage)


@asynccontextmanager
async def worker_session() -> AsyncIterator[AsyncSession]:
    """Database session for one task."""
    session_factory = get_async_session_factory()
    async with session_factory() as session:
        yield session


@worker_process_init.connect
def init_worker_process(**kwargs) -> None:
    """Drop anything inherited from the parent and start a fresh runtime."""
    global _loop
    configure_logging(get_settings().log_level)
    get_async_session_factory.cache_clear()
    get_async_engine.cache_clear()
    get_worker_storage.cache_clear()
    _loop = None
    get_worker_loop()
    logger.info(
        "Conversion worker child started",
        extra={"queue": get_settings().queue.queue_name},
    )


@worker_process_shutdown.connect
def shutdown_worker_process(**kwargs) -> None:
    """Dispose the child's engine and close its loop."""
    global _loop
    if _loop is None or _loop.is_closed():
        return
    if get_async_engine.cache_info().currsize:
        _loop.run_until_complete(get_async_engine().dispose())
    _loop.close()
    _loop = None
