"""
Redis configuration settings.

Connection used by the daily usage counter.

Dependencies: pydantic_settings
System role: Usage counter storage configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    socket_timeout: float = Field(default=3.0, description="Socket timeout in seconds")
