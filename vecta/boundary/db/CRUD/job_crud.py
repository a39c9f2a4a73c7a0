"""
Job CRUD operations.

Job-specific queries plus the two atomic writes the pipeline depends on:

- transition(): conditional status change, so each transition happens once
- record_file_outcome(): counter increment and completion check in one
  UPDATE ... RETURNING; the returned row is the only input to the
  "is the job finished" decision

Dependencies: sqlalchemy, vecta.boundary.db.models
System role: Job persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, case, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.db.CRUD.base_crud import BaseCRUD
from vecta.boundary.db.models.job_model import JobModel, JobStatus, transition_sources


class JobCRUD(BaseCRUD[JobModel]):
    """CRUD operations for JobModel."""

    def __init__(self) -> None:
        super().__init__(JobModel)

    async def get_by_id_and_session(
        self,
        session: AsyncSession,
        id: UUID,
        session_token: str,
    ) -> JobModel | None:
        """
        Retrieve a job owned by a session.

        Args:
            session: Async database session
            id: Job UUID
            session_token: Owning session token

        Returns:
            JobModel if found and owned by the session, None otherwise
        """
        stmt = select(JobModel).where(
            JobModel.id == id,
            JobModel.session_token == session_token,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_expired(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int | None = None,
    ) -> Sequence[JobModel]:
        """
        Retrieve jobs past their expiry that are not already failed.

        Args:
            session: Async database session
            now: Reference time (UTC)
            limit: Maximum number of jobs to return

        Returns:
            Sequence of expired JobModels, oldest expiry first
        """
        stmt = (
            select(JobModel)
            .where(JobModel.expires_at < now, JobModel.status != JobStatus.FAILED)
            .order_by(JobModel.expires_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def transition(
        self,
        session: AsyncSession,
        id: UUID,
        target: JobStatus,
        **values,
    ) -> JobModel | None:
        """
        Move a job to target if its current status allows it.

        Args:
            session: Async database session
            id: Job UUID
            target: New status
            **values: Extra columns to set in the same statement

        Returns:
            Updated JobModel, None if the job is missing or not in a source state
        """
        return await self.update_where(
            session,
            id,
            criteria=[JobModel.status.in_(transition_sources(target))],
            status=target,
            **values,
        )

    async def start_processing(
        self,
        session: AsyncSession,
        id: UUID,
        excluded_files: int = 0,
    ) -> JobModel | None:
        """
        Move a job from PENDING to PROCESSING.

        Files excluded at start are counted as failed in the same statement.

        Args:
            session: Async database session
            id: Job UUID
            excluded_files: Number of files that will never be enqueued

        Returns:
            Updated JobModel, None if the job was not PENDING
        """
        values: dict = {}
        if excluded_files:
            values["failed_files"] = JobModel.failed_files + excluded_files
        return await self.transition(session, id, JobStatus.PROCESSING, **values)

    async def record_file_outcome(
        self,
        session: AsyncSession,
        id: UUID,
        succeeded: bool,
    ) -> JobModel | None:
        """
        Count one finished file and complete the job if it was the last.

        SET expressions see the pre-update row, so the CASE compares the
        incremented total. Concurrent callers serialize on the row lock and
        exactly one of them observes processed == total.

        Args:
            session: Async database session
            id: Job UUID
            succeeded: True to increment completed_files, False for failed_files

        Returns:
            Job row after the increment, None if the job is missing or its
            counters are already full
        """
        completed = JobModel.completed_files + (1 if succeeded else 0)
        failed = JobModel.failed_files + (0 if succeeded else 1)
        finished = and_(
            JobModel.status == JobStatus.PROCESSING,
            completed + failed >= JobModel.total_files,
        )
        status_type = JobModel.__table__.c.status.type
        return await self.update_where(
            session,
            id,
            criteria=[JobModel.completed_files + JobModel.failed_files < JobModel.total_files],
            completed_files=completed,
            failed_files=failed,
            status=case(
                (finished, literal(JobStatus.COMPLETED, status_type)),
                else_=JobModel.status,
            ),
        )

    async def mark_expired(self, session: AsyncSession, id: UUID) -> JobModel | None:
        """Terminal transition used by the reaper; None if already failed."""
        return await self.transition(session, id, JobStatus.FAILED)


job_crud = JobCRUD()
