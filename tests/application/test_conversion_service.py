"""
Test suite for ConversionService.

Drives real conversions through fake storage and SQLite; checks counters,
completion, redelivery and analytics.

System role: Verification of per-task worker logic
"""

import io

import pytest
from PIL import Image
from sqlalchemy import select

from vecta.application.services.conversion_service import ConversionService, build_output_key
from vecta.boundary.db.CRUD import job_crud, job_file_crud
from vecta.boundary.db.models import AnalyticsEventModel, FileStatus, JobStatus
from vecta.configs.conversion import ConversionSettings
from vecta.core.conversion import OutputFormat
from vecta.core.exceptions import ConversionError, StorageError
from vecta.models.task import ConversionTask, TaskOptions


@pytest.fixture
def service(test_async_db, fake_storage) -> ConversionService:
    return ConversionService(test_async_db, fake_storage, ConversionSettings())


def _task(job, file, **options) -> ConversionTask:
    return ConversionTask(
        job_id=job.id,
        file_id=file.id,
        input_key=file.original_key,
        output_format=job.output_format,
        options=TaskOptions(quality=options.pop("quality", 82), **options),
    )


async def _started_job(test_async_db, seed_job, fake_storage, payloads: dict[str, bytes]):
    job, files = await seed_job(test_async_db, file_names=tuple(payloads))
    for file in files:
        fake_storage.put(file.original_key, payloads[file.original_name], "image/png")
    await job_crud.start_processing(test_async_db, job.id)
    await test_async_db.commit()
    return job, files


class TestProcess:
    async def test_process_should_write_output_and_complete_file(
        self, service, test_async_db, seed_job, fake_storage, png_bytes
    ) -> None:
        # Arrange
        job, files = await _started_job(test_async_db, seed_job, fake_storage, {"a.png": png_bytes})

        # Act
        metadata = await service.process(_task(job, files[0], resize_percent=50))

        # Assert
        output_key = f"outputs/{job.id}/a.webp"
        assert output_key in fake_storage.objects
        assert fake_storage.content_types[output_key] == "image/webp"
        assert Image.open(io.BytesIO(fake_storage.objects[output_key])).size == (100, 100)
        assert metadata.output_size == len(fake_storage.objects[output_key])

        stored_file = await job_file_crud.get_by_id(test_async_db, files[0].id)
        assert stored_file.status == FileStatus.COMPLETED
        assert stored_file.converted_key == output_key
        stored_job = await job_crud.get_by_id(test_async_db, job.id)
        assert stored_job.status == JobStatus.COMPLETED
        assert stored_job.completed_files == 1

    async def test_three_files_with_one_corrupt_should_complete_two_of_three(
        self, service, test_async_db, seed_job, fake_storage, png_bytes
    ) -> None:
        # Arrange
        job, files = await _started_job(
            test_async_db,
            seed_job,
            fake_storage,
            {"a.png": png_bytes, "b.png": b"corrupt bytes", "c.png": png_bytes},
        )

        # Act
        await service.process(_task(job, files[0]))
        with pytest.raises(ConversionError) as exc_info:
            await service.process(_task(job, files[1]))
        await service.record_failure(_task(job, files[1]), str(exc_info.value))
        await service.process(_task(job, files[2]))

        # Assert
        stored_job = await job_crud.get_by_id(test_async_db, job.id)
        assert stored_job.status == JobStatus.COMPLETED
        assert (stored_job.completed_files, stored_job.failed_files) == (2, 1)
        failed = await job_file_crud.get_by_id(test_async_db, files[1].id)
        assert failed.status == FileStatus.FAILED
        assert "Invalid image buffer" in failed.error_message

    async def test_redelivered_task_should_not_change_counters(
        self, service, test_async_db, seed_job, fake_storage, png_bytes
    ) -> None:
        # Arrange
        job, files = await _started_job(
            test_async_db, seed_job, fake_storage, {"a.png": png_bytes, "b.png": png_bytes}
        )
        job_id = job.id
        task = _task(job, files[0])
        await service.process(task)

        # Act
        again = await service.process(task)
        late_failure = await service.record_failure(task, "late failure")

        # Assert
        assert again is None
        assert late_failure is None
        stored_job = await job_crud.get_by_id(test_async_db, job_id)
        assert (stored_job.completed_files, stored_job.failed_files) == (1, 0)
        assert stored_job.status == JobStatus.PROCESSING

    async def test_missing_input_should_raise_storage_error(
        self, service, test_async_db, seed_job
    ) -> None:
        # Arrange
        job, files = await seed_job(test_async_db, file_names=("a.png",))
        await job_crud.start_processing(test_async_db, job.id)
        await test_async_db.commit()

        # Act / Assert
        with pytest.raises(StorageError):
            await service.process(_task(job, files[0]))
        stored_file = await job_file_crud.get_by_id(test_async_db, files[0].id)
        assert stored_file.status == FileStatus.PROCESSING

    async def test_success_should_record_analytics_event(
        self, service, test_async_db, seed_job, fake_storage, png_bytes
    ) -> None:
        # Arrange
        job, files = await _started_job(test_async_db, seed_job, fake_storage, {"a.png": png_bytes})

        # Act
        metadata = await service.process(_task(job, files[0], quality=60))

        # Assert
        events = (await test_async_db.execute(select(AnalyticsEventModel))).scalars().all()
        assert len(events) == 1
        assert events[0].input_format == "png"
        assert events[0].output_format == "webp"
        assert events[0].quality == 60
        assert events[0].output_size == metadata.output_size


class TestRecordFailure:
    async def test_final_failure_should_complete_job(
        self, service, test_async_db, seed_job
    ) -> None:
        # Arrange
        job, files = await seed_job(test_async_db, file_names=("a.png",))
        await job_crud.start_processing(test_async_db, job.id)
        await test_async_db.commit()

        # Act
        result = await service.record_failure(_task(job, files[0]), "encoder crashed")

        # Assert
        assert result.status == JobStatus.COMPLETED
        assert result.failed_files == 1


def test_build_output_key_should_replace_extension() -> None:
    key = build_output_key("job-1", "holiday.photo.png", OutputFormat.JPG)
    assert key == "outputs/job-1/holiday.photo.jpg"
