"""
Database models package.

Exports:
  - JobModel, JobStatus, JOB_TRANSITIONS: Job ORM model and state machine
  - JobFileModel, FileStatus: JobFile ORM model and status enum
  - AnalyticsEventModel: Conversion analytics record

Dependencies: sqlalchemy, vecta.boundary.db.base
System role: Database model definitions for domain entities
"""

from vecta.boundary.db.models.job_model import (
    JOB_TRANSITIONS,
    JobModel,
    JobStatus,
    transition_sources,
)
from vecta.boundary.db.models.job_file_model import (
    ACTIVE_FILE_STATUSES,
    FileStatus,
    JobFileModel,
)
from vecta.boundary.db.models.analytics_event_model import (
    CONVERSION_COMPLETED,
    AnalyticsEventModel,
)

__all__ = [
    "JOB_TRANSITIONS",
    "JobModel",
    "JobStatus",
    "transition_sources",
    "ACTIVE_FILE_STATUSES",
    "FileStatus",
    "JobFileModel",
    "CONVERSION_COMPLETED",
    "AnalyticsEventModel",
]
