"""
Task queue configuration settings.

Manages Celery broker/result backend and the conversion worker policy:
attempt cap, backoff, visibility timeout and pool size.

Dependencies: pydantic, pydantic_settings
System role: Async task queue configuration for image conversion
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueSettings(BaseSettings):
    """Celery and conversion worker configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    broker_url: str = Field(default="redis://localhost:6379/0", description="Celery broker URL")
    result_backend_url: str = Field(
        default="redis://localhost:6379/1",
        description="Celery result backend URL",
    )
    queue_name: str = Field(default="image-conversion", description="Conversion queue name")

    task_serializer: str = Field(default="json", description="Task serialization format")
    result_serializer: str = Field(default="json", description="Result serialization format")
    accept_content: list[str] = Field(
        default=["json"],
        description="Accepted content types",
    )
    timezone: str = Field(default="UTC", description="Celery timezone")

    # Retry policy
    max_attempts: int = Field(default=2, description="Total attempts per conversion task")
    retry_backoff_base: float = Field(
        default=1.0,
        description="Backoff before the second attempt in seconds; doubles per attempt",
    )

    # Worker pool
    worker_concurrency: int = Field(default=4, description="Static number of conversion workers")
    conversion_timeout: int = Field(
        default=30,
        description="Seconds a task may be claimed before it is considered abandoned",
    )
    hard_time_limit_grace: int = Field(
        default=10,
        description="Seconds past the soft limit before the worker child is killed",
    )

    cleanup_interval_seconds: int = Field(
        default=1800,
        description="Interval between expiry reaper runs",
    )
