"""
JobFile ORM model.

One input/output pair within a job. Only the worker handling the file's
task writes its status after the job starts.

Dependencies: sqlalchemy, vecta.boundary.db.base
System role: Per-file conversion state
"""

import enum
from uuid import UUID

from sqlalchemy import BigInteger, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vecta.boundary.db.base import Base, TimestampMixin, UUIDMixin
from vecta.boundary.db.models.job_model import _enum_values


class FileStatus(str, enum.Enum):
    """
    JobFile conversion states.

    PENDING: Awaiting upload / task pickup
    PROCESSING: A worker claimed the task
    COMPLETED: Output written; converted_key and converted_size set
    FAILED: Conversion gave up; error_message set
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FileStatus.COMPLETED, FileStatus.FAILED)


ACTIVE_FILE_STATUSES = (FileStatus.PENDING, FileStatus.PROCESSING)


class JobFileModel(Base, UUIDMixin, TimestampMixin):
    """
    JobFile ORM model.

    Attributes:
        job_id: Owning job (cascade delete)
        position: Submission order within the job
        original_name: Sanitized client file name (basename only)
        original_key: Storage key of the uploaded input
        original_size: Declared input size in bytes
        original_format: Short input format (png/jpg/webp)
        status: FileStatus
        converted_key: Storage key of the output once completed
        converted_size: Output size in bytes once completed
        error_message: Failure reason once failed
    """

    __tablename__ = "job_files"

    job_id: Mapped[UUID] = mapped_column(
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    original_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    original_format: Mapped[str | None] = mapped_column(String(16), nullable=True)

    status: Mapped[FileStatus] = mapped_column(
        Enum(FileStatus, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
        default=FileStatus.PENDING,
    )

    converted_key: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    converted_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    job = relationship("JobModel", back_populates="files")
