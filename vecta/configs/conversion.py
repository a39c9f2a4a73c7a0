"""
Image conversion configuration.

Encoder defaults applied when a job does not specify them.

Dependencies: pydantic_settings
System role: Conversion engine configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConversionSettings(BaseSettings):
    """Defaults for the image conversion engine."""

    model_config = SettingsConfigDict(
        env_prefix="CONVERSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_quality: int = Field(default=82, ge=1, le=100, description="Default lossy quality")
    avif_speed: int = Field(default=6, ge=0, le=10, description="AVIF encoder speed (0 slowest)")
    background_color: str = Field(
        default="#FFFFFF",
        description="Background used when flattening alpha",
    )
    strip_metadata: bool = Field(default=True, description="Drop EXIF/ICC from outputs")
