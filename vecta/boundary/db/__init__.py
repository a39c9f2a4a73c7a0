"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin, UUIDMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - JobModel, JobFileModel, AnalyticsEventModel: Domain entities
  - JobStatus, FileStatus: Enum types for state tracking
  - job_crud, job_file_crud, analytics_crud: CRUD operation singletons

Dependencies: sqlalchemy, vecta.configs
System role: Durable job store
"""

from vecta.boundary.db.base import Base, TimestampMixin, UUIDMixin
from vecta.boundary.db.connection import (
    build_session_factory,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from vecta.boundary.db.models import (
    AnalyticsEventModel,
    FileStatus,
    JobFileModel,
    JobModel,
    JobStatus,
)
from vecta.boundary.db.CRUD import (
    AnalyticsCRUD,
    BaseCRUD,
    JobCRUD,
    JobFileCRUD,
    StatsCRUD,
    analytics_crud,
    job_crud,
    job_file_crud,
    stats_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "build_session_factory",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "AnalyticsEventModel",
    "FileStatus",
    "JobFileModel",
    "JobModel",
    "JobStatus",
    # CRUD classes
    "AnalyticsCRUD",
    "BaseCRUD",
    "JobCRUD",
    "JobFileCRUD",
    "StatsCRUD",
    # CRUD singletons
    "analytics_crud",
    "job_crud",
    "job_file_crud",
    "stats_crud",
]
