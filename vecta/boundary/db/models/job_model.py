"""
Job ORM model.

One user-submitted batch conversion request. Counters are only ever changed
by single UPDATE statements (see JobCRUD), never read-modify-write.

Dependencies: sqlalchemy, vecta.boundary.db.base
System role: Durable job record for orchestration and polling
"""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vecta.boundary.db.base import Base, TimestampMixin, UUIDMixin
from vecta.core.conversion.formats import OutputFormat


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class JobStatus(str, enum.Enum):
    """
    Job lifecycle states.

    PENDING: Rows exist and upload URLs were issued; waiting for the client
        to upload and call start. No work has been dispatched.
    PROCESSING: Tasks are enqueued; files are being converted
    COMPLETED: Every file reached a terminal state (some may have failed)
    FAILED: Terminal state for jobs expired by the reaper
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# Allowed next states for each state
JOB_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset({JobStatus.FAILED}),
    JobStatus.FAILED: frozenset(),
}


def transition_sources(target: JobStatus) -> list[JobStatus]:
    """States from which a job may move to target."""
    return [source for source, targets in JOB_TRANSITIONS.items() if target in targets]


class JobModel(Base, UUIDMixin, TimestampMixin):
    """
    Job ORM model.

    Attributes:
        session_token: Owning browser session; every read is scoped by it
        output_format: Target format for all files
        quality: Lossy quality 1-100
        resize_percent: Percentage resize (exclusive with width/height)
        resize_width: Max output width (exclusive with percent)
        resize_height: Max output height (exclusive with percent)
        total_files: Number of JobFiles created
        completed_files: Files converted successfully
        failed_files: Files that ended failed
        status: JobStatus
        expires_at: Retention deadline; the reaper deletes storage after it
        files: JobFile rows (cascade delete)
    """

    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint(
            "completed_files + failed_files <= total_files",
            name="ck_jobs_processed_le_total",
        ),
        CheckConstraint("quality BETWEEN 1 AND 100", name="ck_jobs_quality_range"),
        CheckConstraint(
            "resize_percent IS NULL OR (resize_width IS NULL AND resize_height IS NULL)",
            name="ck_jobs_single_resize_mode",
        ),
    )

    session_token: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    output_format: Mapped[OutputFormat] = mapped_column(
        Enum(OutputFormat, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
    )
    quality: Mapped[int] = mapped_column(Integer, nullable=False)

    resize_percent: Mapped[int | None] = mapped_column(Integer, nullable=True)
    resize_width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    resize_height: Mapped[int | None] = mapped_column(Integer, nullable=True)

    total_files: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_files: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_files: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
        default=JobStatus.PENDING,
        index=True,
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    files = relationship(
        "JobFileModel",
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="JobFileModel.position",
    )
