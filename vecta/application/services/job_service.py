"""
Job service orchestrator.

Owns the two-phase protocol: create (rows + presigned upload URLs, status
PENDING) then start (verify uploads, PENDING -> PROCESSING, enqueue one task
per file). Also serves status, single-file download URLs and the ZIP
archive of completed outputs.

Blocking boto3 and Celery calls run in worker threads via asyncio.to_thread.

Dependencies: vecta.boundary, vecta.application.validators, vecta.models
System role: Job lifecycle orchestration for the HTTP API
"""

import asyncio
import logging
from datetime import timedelta
from typing import AsyncIterator, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vecta.application.archive import ArchiveEntry, stream_zip
from vecta.application.validators import (
    output_file_name,
    validate_files,
    validate_output_format,
    validate_quality,
    validate_resize,
)
from vecta.boundary.aws.s3_client import ObjectStorage
from vecta.boundary.cache.usage_counter import UsageCounter
from vecta.boundary.db.base import utcnow
from vecta.boundary.db.CRUD import job_crud, job_file_crud
from vecta.boundary.db.models import FileStatus, JobFileModel, JobModel, JobStatus
from vecta.boundary.queue.conversion_queue import ConversionQueue
from vecta.configs import Settings
from vecta.core.exceptions import NotFoundError, RateLimitError, ValidationError
from vecta.models.job import (
    CreateJobResponse,
    DownloadUrlResponse,
    FileDescriptor,
    JobFileSummary,
    JobStatusResponse,
    JobSummary,
    ResizeRequest,
    StartJobResponse,
    UploadUrl,
)
from vecta.models.task import ConversionTask, TaskOptions

logger = logging.getLogger(__name__)

UPLOAD_NOT_COMPLETED = "Upload was not completed"


def build_input_key(job_id: UUID, file_name: str) -> str:
    return f"inputs/{job_id}/{file_name}"


class JobService:
    """
    Job orchestrator.

    One instance per request; the AsyncSession is request-scoped and every
    public method commits its own unit of work.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: ObjectStorage,
        queue: ConversionQueue,
        usage_counter: UsageCounter,
        settings: Settings,
    ) -> None:
        """
        Initialize job service.

        Args:
            db: Request-scoped database session
            storage: Object storage gateway
            queue: Conversion task producer
            usage_counter: Daily per-session job counter
            settings: Application settings (limits, conversion defaults)
        """
        self.db = db
        self.storage = storage
        self.queue = queue
        self.usage_counter = usage_counter
        self.settings = settings

    async def create_job(
        self,
        session_token: str,
        files: Sequence[FileDescriptor],
        output_format: str,
        quality: int | None = None,
        resize: ResizeRequest | None = None,
    ) -> CreateJobResponse:
        """
        Create a job and issue one presigned upload URL per file.

        Steps:
        1. Validate files, output format, quality and resize
        2. Enforce the daily usage cap
        3. Persist Job and JobFiles (status PENDING)
        4. Presign upload URLs concurrently
        5. Commit, then count the job against the daily cap

        Raises:
            RateLimitError: Daily usage cap reached
            ValidationError: Request rejected by a validation rule
            FileTooLargeError: A file exceeds the per-file limit
            StorageError: Presigning failed (nothing is persisted)
        """
        limits = self.settings.limits

        target = validate_output_format(output_format)
        job_quality = validate_quality(quality, self.settings.conversion.default_quality)
        resize_spec = validate_resize(
            percent=resize.percent if resize else None,
            width=resize.width if resize else None,
            height=resize.height if resize else None,
        )
        validated = validate_files(files, limits, target)

        used = await self.usage_counter.get(session_token)
        if used >= limits.max_conversions_per_day:
            raise RateLimitError(
                f"Daily limit of {limits.max_conversions_per_day} conversions reached. "
                "Try again tomorrow.",
                {"used": used, "limit": limits.max_conversions_per_day},
            )

        job = await job_crud.create(
            self.db,
            session_token=session_token,
            output_format=target,
            quality=job_quality,
            resize_percent=resize_spec.percent if resize_spec else None,
            resize_width=resize_spec.width if resize_spec else None,
            resize_height=resize_spec.height if resize_spec else None,
            total_files=len(validated),
            status=JobStatus.PENDING,
            expires_at=utcnow() + timedelta(seconds=limits.session_ttl),
        )

        job_files: list[JobFileModel] = []
        for position, file in enumerate(validated):
            job_file = await job_file_crud.create(
                self.db,
                job_id=job.id,
                position=position,
                original_name=file.name,
                original_key=build_input_key(job.id, file.name),
                original_size=file.size,
                original_format=file.input_format,
                status=FileStatus.PENDING,
            )
            job_files.append(job_file)

        try:
            presigned = await asyncio.gather(
                *(
                    asyncio.to_thread(self.storage.presign_upload, job_file.original_key, file.mime_type)
                    for job_file, file in zip(job_files, validated)
                )
            )
        except Exception:
            await self.db.rollback()
            raise

        await self.db.commit()
        await self.usage_counter.increment(session_token)

        logger.info(
            "Job created",
            extra={
                "job_id": str(job.id),
                "file_count": len(job_files),
                "output_format": target.value,
            },
        )

        return CreateJobResponse(
            job_id=job.id,
            upload_urls=[
                UploadUrl(file_id=job_file.id, file_name=job_file.original_name, upload_url=url)
                for job_file, (url, _expires_at) in zip(job_files, presigned)
            ],
        )

    async def start_job(
        self,
        job_id: UUID,
        session_token: str,
        exclude_file_ids: Sequence[UUID] | None = None,
    ) -> StartJobResponse:
        """
        Verify uploads and hand the job to the worker pool.

        Excluded files are failed with "Upload was not completed" and counted
        in the same transaction as the PENDING -> PROCESSING transition.
        If any remaining file is missing from storage nothing changes.

        Raises:
            NotFoundError: Unknown job or not owned by the session
            ValidationError: Job not pending, bad exclusions, or missing uploads
        """
        job = await self._get_owned_job(job_id, session_token)
        if job.status != JobStatus.PENDING:
            raise ValidationError(
                f"Job cannot be started (current status: {job.status.value})",
                field="status",
            )

        files = await job_file_crud.get_by_job_id(self.db, job.id)
        excluded = set(exclude_file_ids or ())
        unknown = excluded - {file.id for file in files}
        if unknown:
            raise ValidationError(
                "Excluded files do not belong to this job",
                field="exclude_file_ids",
                details={"unknown_file_ids": sorted(str(file_id) for file_id in unknown)},
            )

        to_process = [file for file in files if file.id not in excluded]
        if not to_process:
            raise ValidationError("At least one file must be processed", field="exclude_file_ids")

        await self._verify_uploaded(to_process)

        await job_file_crud.mark_pending_failed(
            self.db, job.id, list(excluded), UPLOAD_NOT_COMPLETED
        )
        started = await job_crud.start_processing(self.db, job.id, excluded_files=len(excluded))
        if started is None:
            await self.db.rollback()
            raise ValidationError("Job cannot be started (already started)", field="status")
        await self.db.commit()

        tasks = [
            ConversionTask(
                job_id=started.id,
                file_id=file.id,
                input_key=file.original_key,
                output_format=started.output_format,
                options=TaskOptions(
                    quality=started.quality,
                    resize_percent=started.resize_percent,
                    resize_width=started.resize_width,
                    resize_height=started.resize_height,
                ),
            )
            for file in to_process
        ]
        await asyncio.to_thread(self.queue.enqueue_many, tasks)

        logger.info(
            "Job started",
            extra={
                "job_id": str(job.id),
                "queued_files": len(tasks),
                "excluded_files": len(excluded),
            },
        )
        return StartJobResponse(job_id=started.id, status=started.status, queued_files=len(tasks))

    async def get_status(self, job_id: UUID, session_token: str) -> JobStatusResponse:
        """Job aggregate and its files in submission order."""
        job = await self._get_owned_job(job_id, session_token)
        files = await job_file_crud.get_by_job_id(self.db, job.id)
        return JobStatusResponse(
            job=JobSummary(
                id=job.id,
                status=job.status,
                output_format=job.output_format,
                quality=job.quality,
                total_files=job.total_files,
                completed_files=job.completed_files,
                failed_files=job.failed_files,
                created_at=job.created_at,
                expires_at=job.expires_at,
            ),
            files=[
                JobFileSummary(
                    id=file.id,
                    original_name=file.original_name,
                    original_size=file.original_size,
                    original_format=file.original_format,
                    status=file.status,
                    converted_size=file.converted_size,
                    error_message=file.error_message,
                )
                for file in files
            ],
        )

    async def get_download_url(
        self,
        job_id: UUID,
        file_id: UUID,
        session_token: str,
    ) -> DownloadUrlResponse:
        """
        Presigned GET URL for one converted file.

        Raises:
            NotFoundError: Unknown job, foreign session, or file not in job
            ValidationError: File is not completed
        """
        job = await self._get_owned_job(job_id, session_token)
        file = await job_file_crud.get_for_job(self.db, job.id, file_id)
        if file is None:
            raise NotFoundError("File")
        if file.status != FileStatus.COMPLETED or not file.converted_key:
            raise ValidationError(
                f"File is not ready for download (status: {file.status.value})",
                field="status",
            )

        url = await asyncio.to_thread(self.storage.presign_download, file.converted_key)
        return DownloadUrlResponse(
            url=url,
            file_name=output_file_name(file.original_name, job.output_format),
        )

    async def stream_archive(self, job_id: UUID, session_token: str) -> AsyncIterator[bytes]:
        """
        Validate the job and return a byte iterator over its ZIP archive.

        Validation happens before the iterator is returned, so errors surface
        before any response bytes are sent.

        Raises:
            NotFoundError: Unknown job or foreign session
            ValidationError: Job not completed or no completed files
        """
        job = await self._get_owned_job(job_id, session_token)
        if job.status != JobStatus.COMPLETED:
            raise ValidationError(
                f"Job is not completed (status: {job.status.value})",
                field="status",
            )

        files = await job_file_crud.get_by_job_id(self.db, job.id, status=FileStatus.COMPLETED)
        entries = [
            ArchiveEntry(
                name=output_file_name(file.original_name, job.output_format),
                key=file.converted_key,
            )
            for file in files
            if file.converted_key
        ]
        if not entries:
            raise ValidationError("No completed files to download")

        return stream_zip(self.storage, entries)

    async def _get_owned_job(self, job_id: UUID, session_token: str) -> JobModel:
        job = await job_crud.get_by_id_and_session(self.db, job_id, session_token)
        if job is None:
            raise NotFoundError("Job")
        return job

    async def _verify_uploaded(self, files: Sequence[JobFileModel]) -> None:
        checks = await asyncio.gather(
            *(asyncio.to_thread(self.storage.exists, file.original_key) for file in files)
        )
        missing = [file.original_name for file, found in zip(files, checks) if not found]
        if missing:
            raise ValidationError(
                f"Files not yet uploaded: {', '.join(missing)}",
                details={"missing_files": missing},
            )
