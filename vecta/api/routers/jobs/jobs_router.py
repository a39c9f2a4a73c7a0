"""
Job API endpoints.

Routes:
- POST /jobs - Create job and get presigned upload URLs
- POST /jobs/{id}/start - Verify uploads and start processing
- GET /jobs/{id} - Job status for polling
- GET /jobs/{id}/download/{file_id} - Presigned URL for one output
- GET /jobs/{id}/download - ZIP archive of all outputs

Dependencies: vecta.application.services, vecta.models
System role: Job HTTP API
"""

import logging
import time
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from vecta.api.deps import get_job_service, get_session_token
from vecta.application.services.job_service import JobService
from vecta.models.common import SuccessResponse
from vecta.models.job import (
    CreateJobRequest,
    CreateJobResponse,
    DownloadUrlResponse,
    JobStatusResponse,
    StartJobRequest,
    StartJobResponse,
)

from .job_error_handling import handle_job_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=SuccessResponse[CreateJobResponse], status_code=201)
@handle_job_errors
async def create_job(
    request: CreateJobRequest,
    session_token: str = Depends(get_session_token),
    job_service: JobService = Depends(get_job_service),
) -> SuccessResponse[CreateJobResponse]:
    """
    Create a job and return one presigned upload URL per file.

    The client uploads each file to its URL, then calls POST /jobs/{id}/start.

    Raises:
        HTTPException(413): A file exceeds the size limit
        HTTPException(422): Invalid files, format, quality or resize
        HTTPException(429): Daily conversion limit reached
    """
    logger.info(
        "Creating job",
        extra={"file_count": len(request.files), "output_format": request.output_format},
    )

    result = await job_service.create_job(
        session_token=session_token,
        files=request.files,
        output_format=request.output_format,
        quality=request.quality,
        resize=request.resize,
    )
    return SuccessResponse(data=result)


@router.post("/{job_id}/start", response_model=SuccessResponse[StartJobResponse])
@handle_job_errors
async def start_job(
    job_id: UUID,
    request: StartJobRequest | None = None,
    session_token: str = Depends(get_session_token),
    job_service: JobService = Depends(get_job_service),
) -> SuccessResponse[StartJobResponse]:
    """
    Start processing after uploads finished.

    Raises:
        HTTPException(404): Job not found for this session
        HTTPException(422): Job not pending or uploads missing
    """
    exclude = request.exclude_file_ids if request else None
    result = await job_service.start_job(job_id, session_token, exclude_file_ids=exclude)
    return SuccessResponse(data=result)


@router.get("/{job_id}", response_model=SuccessResponse[JobStatusResponse])
@handle_job_errors
async def get_job_status(
    job_id: UUID,
    session_token: str = Depends(get_session_token),
    job_service: JobService = Depends(get_job_service),
) -> SuccessResponse[JobStatusResponse]:
    """Job aggregate and per-file status. Clients poll this while processing."""
    result = await job_service.get_status(job_id, session_token)
    return SuccessResponse(data=result)


@router.get(
    "/{job_id}/download/{file_id}",
    response_model=SuccessResponse[DownloadUrlResponse],
)
@handle_job_errors
async def download_file(
    job_id: UUID,
    file_id: UUID,
    session_token: str = Depends(get_session_token),
    job_service: JobService = Depends(get_job_service),
) -> SuccessResponse[DownloadUrlResponse]:
    """Presigned download URL and output file name for one completed file."""
    result = await job_service.get_download_url(job_id, file_id, session_token)
    return SuccessResponse(data=result)


@router.get("/{job_id}/download", response_class=StreamingResponse)
@handle_job_errors
async def download_all(
    job_id: UUID,
    session_token: str = Depends(get_session_token),
    job_service: JobService = Depends(get_job_service),
) -> StreamingResponse:
    """
    Stream a ZIP of every completed output.

    Raises:
        HTTPException(404): Job not found for this session
        HTTPException(422): Job not completed or nothing to download
    """
    archive = await job_service.stream_archive(job_id, session_token)
    file_name = f"vecta-convert-{int(time.time() * 1000)}.zip"

    logger.info("Streaming job archive", extra={"job_id": str(job_id)})
    return StreamingResponse(
        archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
