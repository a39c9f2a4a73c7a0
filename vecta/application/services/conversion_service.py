"""
Conversion processing for one queued file.

process() is the worker's happy path; record_failure() is called once the
task has no attempts left. Both finish by counting the file on its job with
the atomic increment in JobCRUD.record_file_outcome(); the row it returns
decides whether this file completed the job.

Dependencies: vecta.core.conversion, vecta.boundary
System role: Per-task business logic executed by conversion workers
"""

import asyncio
import logging
import time
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.application.validators import output_file_name
from vecta.boundary.aws.s3_client import ObjectStorage
from vecta.boundary.db.CRUD import analytics_crud, job_crud, job_file_crud
from vecta.boundary.db.models import JobFileModel, JobModel, JobStatus
from vecta.configs.conversion import ConversionSettings
from vecta.core.conversion import ConversionMetadata, OutputFormat, convert_image
from vecta.models.task import ConversionTask
from vecta.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def build_output_key(job_id: UUID, original_name: str, output_format: OutputFormat) -> str:
    return f"outputs/{job_id}/{output_file_name(original_name, output_format)}"


class ConversionService:
    """Runs one conversion task against storage and the job store."""

    def __init__(
        self,
        db: AsyncSession,
        storage: ObjectStorage,
        settings: ConversionSettings,
    ) -> None:
        self.db = db
        self.storage = storage
        self.settings = settings

    async def process(self, task: ConversionTask) -> ConversionMetadata | None:
        """
        Convert one file and record the result.

        Returns:
            ConversionMetadata of the output, None when the file was already
            terminal (redelivered task) and nothing was done

        Raises:
            ConversionError: Input undecodable or encoder failure
            StorageError: Input download or output upload failed
        """
        started_at = time.perf_counter()

        job_file = await job_file_crud.mark_processing(self.db, task.file_id)
        if job_file is None:
            await self.db.rollback()
            logger.info(
                "File already terminal, skipping task",
                extra={"job_id": str(task.job_id), "file_id": str(task.file_id)},
            )
            return None
        await self.db.commit()

        logger.info(
            "Starting conversion",
            extra={
                "job_id": str(task.job_id),
                "file_id": str(task.file_id),
                "output_format": task.output_format.value,
                "quality": task.options.quality,
                "resize_percent": task.options.resize_percent,
                "resize_width": task.options.resize_width,
                "resize_height": task.options.resize_height,
            },
        )

        data = await asyncio.to_thread(self.storage.get, task.input_key)
        options = task.to_conversion_options(
            strip_metadata=self.settings.strip_metadata,
            background_color=self.settings.background_color,
            avif_speed=self.settings.avif_speed,
        )
        result = await asyncio.to_thread(convert_image, data, options)

        output_key = build_output_key(task.job_id, job_file.original_name, task.output_format)
        await asyncio.to_thread(self.storage.put, output_key, result.data, result.metadata.mime)

        completed = await job_file_crud.mark_completed(
            self.db,
            task.file_id,
            converted_key=output_key,
            converted_size=result.metadata.output_size,
        )
        if completed is None:
            await self.db.rollback()
            logger.warning(
                "File finished by another delivery, not counting",
                extra={"job_id": str(task.job_id), "file_id": str(task.file_id)},
            )
            return None

        job = await job_crud.record_file_outcome(self.db, task.job_id, succeeded=True)
        await self.db.commit()

        duration_ms = int((time.perf_counter() - started_at) * 1000)
        metadata = result.metadata
        logger.info(
            "Conversion completed",
            extra={
                "job_id": str(task.job_id),
                "file_id": str(task.file_id),
                "duration_ms": duration_ms,
                "input_size": metadata.input_size,
                "output_size": metadata.output_size,
                "savings_percent": metadata.savings_percent,
                "warnings": metadata.warnings,
                "output_key": output_key,
            },
        )
        self._log_job_finished(job)

        await self._record_analytics(job_file, task, metadata, duration_ms)
        return metadata

    async def record_failure(self, task: ConversionTask, error_message: str) -> JobModel | None:
        """
        Mark the file failed after its final attempt and count it on the job.

        Returns:
            Job row after the increment, None if the file was already terminal
        """
        failed = await job_file_crud.mark_failed(self.db, task.file_id, error_message)
        if failed is None:
            await self.db.rollback()
            logger.info(
                "File already terminal, failure not recorded",
                extra={"job_id": str(task.job_id), "file_id": str(task.file_id)},
            )
            return None

        job = await job_crud.record_file_outcome(self.db, task.job_id, succeeded=False)
        await self.db.commit()

        logger.error(
            "Conversion failed",
            extra={
                "job_id": str(task.job_id),
                "file_id": str(task.file_id),
                "error": error_message,
            },
        )
        self._log_job_finished(job)
        return job

    def _log_job_finished(self, job: JobModel | None) -> None:
        # Only the increment that filled the counters returns a COMPLETED row
        if job is None or job.status != JobStatus.COMPLETED:
            return
        logger.info(
            "Job finished",
            extra={
                "job_id": str(job.id),
                "total_files": job.total_files,
                "completed": job.completed_files,
                "failed": job.failed_files,
            },
        )

    async def _record_analytics(
        self,
        job_file: JobFileModel,
        task: ConversionTask,
        metadata: ConversionMetadata,
        duration_ms: int,
    ) -> None:
        try:
            await analytics_crud.log_conversion_event(
                self.db,
                input_format=job_file.original_format,
                output_format=task.output_format.value,
                input_size=metadata.input_size,
                output_size=metadata.output_size,
                savings_percent=metadata.savings_percent,
                duration_ms=duration_ms,
                quality=task.options.quality,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log_exception_with_context(
                logger,
                "Failed to log analytics event",
                e,
                job_id=str(task.job_id),
                file_id=str(task.file_id),
            )
