"""
JobFile CRUD operations.

Status writes are conditional on the file not being terminal yet, so a
redelivered task cannot overwrite or double-count a finished file.

Dependencies: sqlalchemy, vecta.boundary.db.models
System role: Per-file persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.db.CRUD.base_crud import BaseCRUD
from vecta.boundary.db.models.job_file_model import (
    ACTIVE_FILE_STATUSES,
    FileStatus,
    JobFileModel,
)


class JobFileCRUD(BaseCRUD[JobFileModel]):
    """CRUD operations for JobFileModel."""

    def __init__(self) -> None:
        super().__init__(JobFileModel)

    async def get_by_job_id(
        self,
        session: AsyncSession,
        job_id: UUID,
        status: FileStatus | None = None,
    ) -> Sequence[JobFileModel]:
        """
        Retrieve a job's files in submission order.

        Args:
            session: Async database session
            job_id: Parent job UUID
            status: Optional status filter

        Returns:
            Sequence of JobFileModels
        """
        stmt = select(JobFileModel).where(JobFileModel.job_id == job_id)
        if status is not None:
            stmt = stmt.where(JobFileModel.status == status)
        stmt = stmt.order_by(JobFileModel.position)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_for_job(
        self,
        session: AsyncSession,
        job_id: UUID,
        file_id: UUID,
    ) -> JobFileModel | None:
        """Retrieve a file only if it belongs to the given job."""
        stmt = select(JobFileModel).where(
            JobFileModel.id == file_id,
            JobFileModel.job_id == job_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_storage_keys(self, session: AsyncSession, job_id: UUID) -> list[str]:
        """All input and output keys recorded for a job."""
        stmt = select(JobFileModel.original_key, JobFileModel.converted_key).where(
            JobFileModel.job_id == job_id
        )
        result = await session.execute(stmt)
        keys: list[str] = []
        for original_key, converted_key in result.all():
            if original_key:
                keys.append(original_key)
            if converted_key:
                keys.append(converted_key)
        return keys

    async def mark_processing(self, session: AsyncSession, id: UUID) -> JobFileModel | None:
        """Claim a file for conversion; None if it is already terminal."""
        return await self.update_where(
            session,
            id,
            criteria=[JobFileModel.status.in_(ACTIVE_FILE_STATUSES)],
            status=FileStatus.PROCESSING,
        )

    async def mark_completed(
        self,
        session: AsyncSession,
        id: UUID,
        converted_key: str,
        converted_size: int,
    ) -> JobFileModel | None:
        """Record a successful conversion; None if the file was already terminal."""
        return await self.update_where(
            session,
            id,
            criteria=[JobFileModel.status.in_(ACTIVE_FILE_STATUSES)],
            status=FileStatus.COMPLETED,
            converted_key=converted_key,
            converted_size=converted_size,
            error_message=None,
        )

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
    ) -> JobFileModel | None:
        """Record a terminal failure; None if the file was already terminal."""
        return await self.update_where(
            session,
            id,
            criteria=[JobFileModel.status.in_(ACTIVE_FILE_STATUSES)],
            status=FileStatus.FAILED,
            error_message=error_message,
        )

    async def mark_pending_failed(
        self,
        session: AsyncSession,
        job_id: UUID,
        file_ids: Sequence[UUID],
        error_message: str,
    ) -> int:
        """
        Fail files that never started (excluded uploads).

        Returns:
            int: Number of rows changed
        """
        if not file_ids:
            return 0
        stmt = (
            update(JobFileModel)
            .where(
                JobFileModel.job_id == job_id,
                JobFileModel.id.in_(list(file_ids)),
                JobFileModel.status == FileStatus.PENDING,
            )
            .values(status=FileStatus.FAILED, error_message=error_message)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount


job_file_crud = JobFileCRUD()
