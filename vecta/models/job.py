"""
Job request/response schemas.

Request models only check shape; business rules (limits, file names,
MIME allow-list) are enforced by JobService so every caller gets them.

Dependencies: pydantic
System role: Job API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from vecta.boundary.db.models import FileStatus, JobStatus
from vecta.core.conversion import OutputFormat


class FileDescriptor(BaseModel):
    """A file the client intends to upload."""

    name: str = Field(min_length=1, max_length=255, description="Client file name")
    size: int = Field(ge=0, description="Size in bytes")
    mime_type: str = Field(description="Declared MIME type")


class ResizeRequest(BaseModel):
    """Percent OR width/height; JobService rejects both."""

    percent: int | None = None
    width: int | None = None
    height: int | None = None


class CreateJobRequest(BaseModel):
    files: list[FileDescriptor]
    output_format: str = Field(description="webp, jpg, png or avif")
    quality: int | None = Field(default=None, description="1-100, defaults to server setting")
    resize: ResizeRequest | None = None


class UploadUrl(BaseModel):
    file_id: uuid.UUID
    file_name: str
    upload_url: str


class CreateJobResponse(BaseModel):
    job_id: uuid.UUID
    upload_urls: list[UploadUrl]


class StartJobRequest(BaseModel):
    exclude_file_ids: list[uuid.UUID] | None = None


class StartJobResponse(BaseModel):
    job_id: uuid.UUID
    status: JobStatus
    queued_files: int


class JobSummary(BaseModel):
    id: uuid.UUID
    status: JobStatus
    output_format: OutputFormat
    quality: int
    total_files: int
    completed_files: int
    failed_files: int
    created_at: datetime
    expires_at: datetime


class JobFileSummary(BaseModel):
    id: uuid.UUID
    original_name: str
    original_size: int
    original_format: str | None
    status: FileStatus
    converted_size: int | None = None
    error_message: str | None = None


class JobStatusResponse(BaseModel):
    job: JobSummary
    files: list[JobFileSummary]


class DownloadUrlResponse(BaseModel):
    url: str
    file_name: str
