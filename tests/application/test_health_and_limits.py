"""
Test suite for HealthService and UsageLimitService.
"""

from vecta.application.services.health_service import HealthService
from vecta.application.services.usage_limit_service import UsageLimitService
from vecta.configs.limits import LimitsSettings


class TestHealthService:
    async def test_all_checks_healthy(self, test_async_db, usage_counter, fake_storage) -> None:
        service = HealthService(test_async_db, usage_counter, fake_storage)

        assert await service.check() == {"database": True, "redis": True, "storage": True}

    async def test_storage_down_should_be_reported(
        self, test_async_db, usage_counter, fake_storage
    ) -> None:
        fake_storage.healthy = False
        service = HealthService(test_async_db, usage_counter, fake_storage)

        checks = await service.check()

        assert checks["storage"] is False
        assert checks["database"] is True


class TestUsageLimitService:
    async def test_limits_should_include_current_usage(self, usage_counter) -> None:
        # Arrange
        await usage_counter.increment("session-a")
        await usage_counter.increment("session-a")
        limits = LimitsSettings(max_conversions_per_day=5, max_file_size=1024, max_files_per_job=4)

        # Act
        result = await UsageLimitService(usage_counter, limits).get_limits("session-a")

        # Assert
        assert result.used == 2
        assert result.max_conversions_per_day == 5
        assert result.max_file_size == 1024
        assert result.max_files_per_job == 4

    async def test_unknown_session_should_have_zero_usage(self, usage_counter) -> None:
        result = await UsageLimitService(usage_counter, LimitsSettings()).get_limits("fresh")

        assert result.used == 0
