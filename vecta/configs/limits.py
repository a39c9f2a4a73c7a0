"""
Upload and usage limits.

Dependencies: pydantic_settings
System role: Request validation limits for job submission
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LimitsSettings(BaseSettings):
    """Per-file, per-job and per-session limits."""

    model_config = SettingsConfigDict(
        env_prefix="LIMITS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_file_size: int = Field(default=20 * 1024 * 1024, description="Max bytes per file")
    max_files_per_job: int = Field(default=20, description="Max files per job")
    max_total_job_size: int = Field(
        default=100 * 1024 * 1024,
        description="Max combined bytes per job",
    )
    max_conversions_per_day: int = Field(
        default=50,
        description="Jobs a session may create per day",
    )
    session_ttl: int = Field(
        default=7200,
        description="Session cookie lifetime and job retention window in seconds",
    )
