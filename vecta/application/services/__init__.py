"""
Application services.

Exports:
  - JobService: Job lifecycle orchestration
  - ConversionService: Per-task conversion processing
  - CleanupService: Expiry reaper
  - UsageLimitService: Daily usage reporting
  - HealthService: Dependency health checks
  - StatsService: Admin statistics
"""

from vecta.application.services.cleanup_service import CleanupService
from vecta.application.services.conversion_service import ConversionService
from vecta.application.services.health_service import HealthService
from vecta.application.services.job_service import JobService
from vecta.application.services.stats_service import StatsService
from vecta.application.services.usage_limit_service import UsageLimitService

__all__ = [
    "CleanupService",
    "ConversionService",
    "HealthService",
    "JobService",
    "StatsService",
    "UsageLimitService",
]
