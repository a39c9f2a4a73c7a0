"""
Test suite for the HTTP API.

Services are replaced through FastAPI dependency overrides; these tests
cover routing, the response envelope, error mapping and the session cookie.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from vecta.api.deps import get_health_service, get_job_service, get_usage_limit_service
from vecta.api.main import create_app
from vecta.api.session import SESSION_COOKIE_NAME
from vecta.boundary.db.models import JobStatus
from vecta.core.exceptions import FileTooLargeError, NotFoundError, RateLimitError, ValidationError
from vecta.models.job import CreateJobResponse, DownloadUrlResponse, StartJobResponse, UploadUrl
from vecta.models.limits import LimitsResponse

JOB_ID = uuid.uuid4()
FILE_ID = uuid.uuid4()

CREATE_BODY = {
    "files": [{"name": "a.png", "size": 1000, "mime_type": "image/png"}],
    "output_format": "webp",
    "quality": 80,
}


@pytest.fixture
def job_service() -> MagicMock:
    service = MagicMock()
    service.create_job = AsyncMock(
        return_value=CreateJobResponse(
            job_id=JOB_ID,
            upload_urls=[
                UploadUrl(file_id=FILE_ID, file_name="a.png", upload_url="https://storage.test/put")
            ],
        )
    )
    service.start_job = AsyncMock(
        return_value=StartJobResponse(job_id=JOB_ID, status=JobStatus.PROCESSING, queued_files=1)
    )
    service.get_status = AsyncMock()
    service.get_download_url = AsyncMock(
        return_value=DownloadUrlResponse(url="https://storage.test/get", file_name="a.webp")
    )
    service.stream_archive = AsyncMock()
    return service


@pytest.fixture
def health_service() -> MagicMock:
    service = MagicMock()
    service.check = AsyncMock(return_value={"database": True, "redis": True, "storage": True})
    return service


@pytest.fixture
def usage_limit_service() -> MagicMock:
    service = MagicMock()
    service.get_limits = AsyncMock(
        return_value=LimitsResponse(
            used=3, max_conversions_per_day=50, max_file_size=1024, max_files_per_job=20
        )
    )
    return service


@pytest.fixture
def client(job_service, health_service, usage_limit_service) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_job_service] = lambda: job_service
    app.dependency_overrides[get_health_service] = lambda: health_service
    app.dependency_overrides[get_usage_limit_service] = lambda: usage_limit_service
    return TestClient(app)


class TestCreateJob:
    def test_create_job_should_return_201_with_envelope(self, client, job_service) -> None:
        response = client.post("/api/v1/jobs", json=CREATE_BODY)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["job_id"] == str(JOB_ID)
        assert body["data"]["upload_urls"][0]["file_name"] == "a.png"
        assert job_service.create_job.await_args.kwargs["output_format"] == "webp"

    def test_first_request_should_issue_session_cookie(self, client) -> None:
        response = client.post("/api/v1/jobs", json=CREATE_BODY)

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{SESSION_COOKIE_NAME}=")
        assert "HttpOnly" in set_cookie
        assert "samesite=strict" in set_cookie.lower()

    def test_existing_cookie_should_be_reused(self, client, job_service) -> None:
        response = client.post(
            "/api/v1/jobs",
            json=CREATE_BODY,
            headers={"Cookie": f"{SESSION_COOKIE_NAME}=session-a"},
        )

        assert "set-cookie" not in response.headers
        assert job_service.create_job.await_args.kwargs["session_token"] == "session-a"

    @pytest.mark.parametrize(
        ("error", "status_code", "code"),
        [
            (ValidationError("Duplicate file name: \"a.png\"", field="name"), 422, "VALIDATION_ERROR"),
            (FileTooLargeError(2048, 1024), 413, "FILE_TOO_LARGE"),
            (RateLimitError("Daily conversion limit reached"), 429, "RATE_LIMIT"),
        ],
    )
    def test_domain_errors_should_map_to_status_and_code(
        self, client, job_service, error, status_code, code
    ) -> None:
        job_service.create_job.side_effect = error

        response = client.post("/api/v1/jobs", json=CREATE_BODY)

        assert response.status_code == status_code
        assert response.json() == {
            "success": False,
            "error": {"code": code, "message": error.message},
        }

    def test_malformed_body_should_use_error_envelope(self, client) -> None:
        response = client.post("/api/v1/jobs", json={"files": "nope"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    def test_unexpected_error_should_hide_details(self, client, job_service) -> None:
        job_service.create_job.side_effect = RuntimeError("database password is hunter2")

        response = client.post("/api/v1/jobs", json=CREATE_BODY)

        assert response.status_code == 500
        assert response.json()["error"] == {
            "code": "INTERNAL_ERROR",
            "message": "Internal server error",
        }


class TestJobRoutes:
    def test_start_job_without_body_should_pass_no_exclusions(self, client, job_service) -> None:
        response = client.post(f"/api/v1/jobs/{JOB_ID}/start")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "processing"
        assert job_service.start_job.await_args.kwargs["exclude_file_ids"] is None

    def test_start_job_should_forward_exclusions(self, client, job_service) -> None:
        response = client.post(
            f"/api/v1/jobs/{JOB_ID}/start",
            json={"exclude_file_ids": [str(FILE_ID)]},
        )

        assert response.status_code == 200
        assert job_service.start_job.await_args.kwargs["exclude_file_ids"] == [FILE_ID]

    def test_unknown_job_should_return_not_found_envelope(self, client, job_service) -> None:
        job_service.get_status.side_effect = NotFoundError("Job")

        response = client.get(f"/api/v1/jobs/{JOB_ID}")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Job not found"},
        }

    def test_invalid_job_id_should_fail_validation(self, client) -> None:
        response = client.get("/api/v1/jobs/not-a-uuid")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_route_should_use_error_envelope(self, client) -> None:
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_download_file_should_return_presigned_url(self, client) -> None:
        response = client.get(f"/api/v1/jobs/{JOB_ID}/download/{FILE_ID}")

        assert response.status_code == 200
        assert response.json()["data"] == {"url": "https://storage.test/get", "file_name": "a.webp"}

    def test_download_all_should_stream_zip(self, client, job_service) -> None:
        async def archive():
            yield b"PK\x03\x04"
            yield b"rest"

        job_service.stream_archive.return_value = archive()

        response = client.get(f"/api/v1/jobs/{JOB_ID}/download")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="vecta-convert-')
        assert disposition.endswith('.zip"')
        assert response.content == b"PK\x03\x04rest"

    def test_download_all_before_completion_should_fail_before_streaming(
        self, client, job_service
    ) -> None:
        job_service.stream_archive.side_effect = ValidationError("Job is not completed")

        response = client.get(f"/api/v1/jobs/{JOB_ID}/download")

        assert response.status_code == 422
        assert response.headers["content-type"] == "application/json"


class TestLimitsAndHealth:
    def test_limits_should_report_usage(self, client) -> None:
        response = client.get("/api/v1/limits")

        assert response.status_code == 200
        assert response.json()["data"]["used"] == 3

    def test_health_should_be_ok_when_all_checks_pass(self, client) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_should_return_503_when_a_check_fails(self, client, health_service) -> None:
        health_service.check.return_value = {"database": True, "redis": False, "storage": True}

        response = client.get("/api/v1/health")

        assert response.status_code == 503
        assert response.json() == {
            "status": "degraded",
            "checks": {"database": True, "redis": False, "storage": True},
        }
