"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from vecta.configs.base import BaseSettings
from vecta.configs.conversion import ConversionSettings
from vecta.configs.database import DatabaseSettings
from vecta.configs.limits import LimitsSettings
from vecta.configs.queue import QueueSettings
from vecta.configs.redis import RedisSettings
from vecta.configs.storage import StorageSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    allowed_origins: str = Field(
        default="http://localhost:5173",
        description="Comma-separated CORS origins",
    )
    admin_key: str = Field(
        default="",
        description="Value required in the X-Admin-Key header; empty disables admin routes",
    )

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    storage: StorageSettings = StorageSettings()
    queue: QueueSettings = QueueSettings()
    redis: RedisSettings = RedisSettings()
    conversion: ConversionSettings = ConversionSettings()
    limits: LimitsSettings = LimitsSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from vecta.configs import get_settings
        settings = get_settings()
    """
    return Settings()
