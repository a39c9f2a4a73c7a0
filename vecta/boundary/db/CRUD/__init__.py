"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from vecta.boundary.db.CRUD import job_crud, job_file_crud

    job = await job_crud.get_by_id_and_session(db, job_id, session_token)
"""

from vecta.boundary.db.CRUD.base_crud import BaseCRUD
from vecta.boundary.db.CRUD.job_crud import JobCRUD, job_crud
from vecta.boundary.db.CRUD.job_file_crud import JobFileCRUD, job_file_crud
from vecta.boundary.db.CRUD.analytics_crud import AnalyticsCRUD, analytics_crud
from vecta.boundary.db.CRUD.stats_crud import StatsCRUD, stats_crud

__all__ = [
    "BaseCRUD",
    "JobCRUD",
    "job_crud",
    "JobFileCRUD",
    "job_file_crud",
    "AnalyticsCRUD",
    "analytics_crud",
    "StatsCRUD",
    "stats_crud",
]
