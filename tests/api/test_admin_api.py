"""
Test suite for the admin API: key guard, stats and on-demand cleanup.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from vecta.api.deps import get_cleanup_service, get_settings_dependency, get_stats_service
from vecta.api.main import create_app
from vecta.configs import Settings
from vecta.models.stats import (
    BytesProcessed,
    ConversionCounts,
    ConversionPerformance,
    ErrorRate,
    FormatCount,
    HourlyCount,
    StatsResponse,
)

ADMIN_KEY = "admin-secret"

STATS = StatsResponse(
    conversions=ConversionCounts(today=2, week=5, month=9, total=12),
    bytes=BytesProcessed(total_input=5000, total_output=2000),
    formats=[FormatCount(format="webp", count=12)],
    hourly=[HourlyCount(hour=datetime(2026, 1, 1, 10, tzinfo=timezone.utc), count=2)],
    error_rate=ErrorRate(total=10, failed=1),
    performance=ConversionPerformance(events=11, avg_savings_percent=55.5, avg_duration_ms=120),
)


@pytest.fixture
def stats_service() -> MagicMock:
    service = MagicMock()
    service.get_stats = AsyncMock(return_value=STATS)
    return service


@pytest.fixture
def cleanup_service() -> MagicMock:
    service = MagicMock()
    service.clean_expired_jobs = AsyncMock(return_value=3)
    return service


def _client(admin_key: str, stats_service, cleanup_service) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_settings_dependency] = lambda: Settings(admin_key=admin_key)
    app.dependency_overrides[get_stats_service] = lambda: stats_service
    app.dependency_overrides[get_cleanup_service] = lambda: cleanup_service
    return TestClient(app)


@pytest.fixture
def client(stats_service, cleanup_service) -> TestClient:
    return _client(ADMIN_KEY, stats_service, cleanup_service)


class TestAdminKey:
    def test_missing_key_should_be_unauthorized(self, client, stats_service) -> None:
        response = client.get("/api/v1/admin/stats")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": {"code": "UNAUTHORIZED", "message": "Invalid admin key"},
        }
        stats_service.get_stats.assert_not_awaited()

    def test_wrong_key_should_be_unauthorized(self, client) -> None:
        response = client.get("/api/v1/admin/stats", headers={"X-Admin-Key": "guess"})

        assert response.status_code == 401

    def test_unconfigured_key_should_close_admin_routes(self, stats_service, cleanup_service) -> None:
        client = _client("", stats_service, cleanup_service)

        response = client.get("/api/v1/admin/stats", headers={"X-Admin-Key": ""})

        assert response.status_code == 401
        stats_service.get_stats.assert_not_awaited()


class TestAdminRoutes:
    def test_stats_should_return_envelope(self, client) -> None:
        response = client.get("/api/v1/admin/stats", headers={"X-Admin-Key": ADMIN_KEY})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["conversions"] == {"today": 2, "week": 5, "month": 9, "total": 12}
        assert data["formats"] == [{"format": "webp", "count": 12}]
        assert data["error_rate"] == {"total": 10, "failed": 1}
        assert data["hourly"][0]["count"] == 2

    def test_cleanup_should_run_one_reaper_pass(self, client, cleanup_service) -> None:
        response = client.post("/api/v1/admin/cleanup", headers={"X-Admin-Key": ADMIN_KEY})

        assert response.status_code == 200
        assert response.json()["data"] == {"cleaned": 3}
        cleanup_service.clean_expired_jobs.assert_awaited_once()
