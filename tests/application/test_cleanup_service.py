"""
Test suite for CleanupService (expiry reaper).
"""

import asyncio
from datetime import timedelta

import pytest

from vecta.application.services.cleanup_service import CleanupService
from vecta.boundary.db.CRUD import job_crud, job_file_crud
from vecta.boundary.db.models import JobStatus


@pytest.fixture
def cleanup_service(test_async_db, fake_storage) -> CleanupService:
    return CleanupService(test_async_db, fake_storage)


class TestCleanExpiredJobs:
    async def test_expired_job_should_lose_objects_and_fail(
        self, cleanup_service, test_async_db, seed_job, fake_storage
    ) -> None:
        # Arrange
        job, files = await seed_job(
            test_async_db, file_names=("a.png",), expires_in=timedelta(minutes=-5)
        )
        fake_storage.put(files[0].original_key, b"in", "image/png")
        output_key = f"outputs/{job.id}/a.webp"
        job_id = job.id
        expected_keys = sorted([files[0].original_key, output_key])
        fake_storage.put(output_key, b"out", "image/webp")
        await job_file_crud.mark_completed(test_async_db, files[0].id, output_key, 3)
        await test_async_db.commit()

        # Act
        cleaned = await cleanup_service.clean_expired_jobs()

        # Assert
        assert cleaned == 1
        assert sorted(fake_storage.deleted) == expected_keys
        assert fake_storage.objects == {}
        stored = await job_crud.get_by_id(test_async_db, job_id)
        assert stored.status == JobStatus.FAILED

    async def test_second_run_should_find_nothing(
        self, cleanup_service, test_async_db, seed_job
    ) -> None:
        # Arrange
        await seed_job(test_async_db, expires_in=timedelta(minutes=-5))
        await cleanup_service.clean_expired_jobs()

        # Act / Assert
        assert await cleanup_service.clean_expired_jobs() == 0

    async def test_unexpired_jobs_should_be_left_alone(
        self, cleanup_service, test_async_db, seed_job, fake_storage
    ) -> None:
        # Arrange
        job, files = await seed_job(test_async_db, expires_in=timedelta(hours=1))
        fake_storage.put(files[0].original_key, b"in", "image/png")
        job_id, input_key = job.id, files[0].original_key

        # Act
        cleaned = await cleanup_service.clean_expired_jobs()

        # Assert
        assert cleaned == 0
        assert input_key in fake_storage.objects
        stored = await job_crud.get_by_id(test_async_db, job_id)
        assert stored.status == JobStatus.PENDING

    async def test_one_failing_job_should_not_stop_the_run(
        self, cleanup_service, test_async_db, seed_job, fake_storage
    ) -> None:
        # Arrange
        broken, broken_files = await seed_job(
            test_async_db, file_names=("x.png",), expires_in=timedelta(minutes=-10)
        )
        healthy, _ = await seed_job(
            test_async_db, file_names=("y.png",), expires_in=timedelta(minutes=-5)
        )
        fake_storage.failing_keys.add(broken_files[0].original_key)
        broken_id, healthy_id = broken.id, healthy.id

        # Act
        cleaned = await cleanup_service.clean_expired_jobs()

        # Assert
        assert cleaned == 1
        assert (await job_crud.get_by_id(test_async_db, healthy_id)).status == JobStatus.FAILED
        assert (await job_crud.get_by_id(test_async_db, broken_id)).status == JobStatus.PENDING

    async def test_completed_jobs_are_expired_too(
        self, cleanup_service, test_async_db, seed_job
    ) -> None:
        # Arrange
        job, _ = await seed_job(
            test_async_db, status=JobStatus.COMPLETED, expires_in=timedelta(minutes=-1)
        )
        job_id = job.id

        # Act
        cleaned = await cleanup_service.clean_expired_jobs()

        # Assert
        assert cleaned == 1
        assert (await job_crud.get_by_id(test_async_db, job_id)).status == JobStatus.FAILED


class TestConcurrentCleanup:
    async def test_overlapping_runs_should_count_job_once(
        self, file_session_factory, seed_job, fake_storage
    ) -> None:
        # Arrange
        async with file_session_factory() as db:
            job, files = await seed_job(db, file_names=("a.png",), expires_in=timedelta(minutes=-5))
            job_id = job.id
            output_key = f"outputs/{job_id}/a.webp"
            keys = sorted([files[0].original_key, output_key])
            fake_storage.put(files[0].original_key, b"in", "image/png")
            fake_storage.put(output_key, b"out", "image/webp")
            await job_file_crud.mark_completed(db, files[0].id, output_key, 3)
            await db.commit()

        async def run_once() -> int:
            async with file_session_factory() as db:
                return await CleanupService(db, fake_storage).clean_expired_jobs()

        # Act
        results = await asyncio.gather(run_once(), run_once())

        # Assert
        assert sorted(results) == [0, 1]
        assert fake_storage.objects == {}
        assert set(fake_storage.deleted) == set(keys)
        async with file_session_factory() as db:
            stored = await job_crud.get_by_id(db, job_id)
            assert stored.status == JobStatus.FAILED
