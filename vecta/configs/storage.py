"""
Object storage configuration.

Settings for the S3-compatible bucket (AWS S3 or MinIO) holding job inputs
and outputs, and for presigned URL generation.

Dependencies: pydantic_settings
System role: Object storage configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for S3 bucket operations."""

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="converter", description="Bucket for job inputs and outputs")
    region: str = Field(default="us-east-1", description="Bucket region")
    endpoint_url: str | None = Field(
        default=None,
        description="Custom endpoint (MinIO); None uses AWS",
    )
    access_key: str | None = Field(default=None, description="Access key id")
    secret_key: str | None = Field(default=None, description="Secret access key")
    force_path_style: bool = Field(
        default=True,
        description="Use path-style addressing (required by MinIO)",
    )
    presigned_url_expiry: int = Field(
        default=3600,
        description="Presigned URL expiry in seconds (default 1 hour)",
    )
    download_url_cache_margin: int = Field(
        default=300,
        description="Seconds before expiry at which a cached download URL is reissued",
    )
