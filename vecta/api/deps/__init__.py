"""
Dependency injection exports for FastAPI routes.
"""

from vecta.api.deps.dependencies import (
    get_cleanup_service,
    get_conversion_queue,
    get_health_service,
    get_job_service,
    get_object_storage,
    get_service_cache,
    get_settings_dependency,
    get_stats_service,
    get_usage_counter,
    get_usage_limit_service,
)
from vecta.api.session import get_session_token

__all__ = [
    "get_cleanup_service",
    "get_conversion_queue",
    "get_health_service",
    "get_job_service",
    "get_object_storage",
    "get_service_cache",
    "get_session_token",
    "get_settings_dependency",
    "get_stats_service",
    "get_usage_counter",
    "get_usage_limit_service",
]
