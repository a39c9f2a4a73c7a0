"""
Daily usage counter.

One Redis key per session, `daily_usage:{session_token}`. The first INCR of
a window sets a 24h TTL; later increments leave the TTL alone, so the window
is anchored to the session's first job of the day.

Dependencies: redis (asyncio client)
System role: Per-session daily job quota
"""

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from vecta.configs.redis import RedisSettings

logger = logging.getLogger(__name__)

USAGE_KEY_PREFIX = "daily_usage"
USAGE_WINDOW_SECONDS = 86400


def usage_key(session_token: str) -> str:
    return f"{USAGE_KEY_PREFIX}:{session_token}"


class UsageCounter:
    """Async wrapper over the daily usage keys."""

    def __init__(self, client: Redis, window_seconds: int = USAGE_WINDOW_SECONDS) -> None:
        self._client = client
        self._window = window_seconds

    async def get(self, session_token: str) -> int:
        """Current count for the session, 0 when no key exists."""
        value = await self._client.get(usage_key(session_token))
        return int(value) if value is not None else 0

    async def increment(self, session_token: str) -> int:
        """
        Increment the session's counter.

        Returns:
            int: Count after the increment
        """
        key = usage_key(session_token)
        count = await self._client.incr(key)
        if count == 1:
            await self._client.expire(key, self._window)
        return count

    async def ping(self) -> bool:
        """Health check: True if Redis answers."""
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as e:
            logger.warning("Redis health check failed", extra={"error": str(e)})
            return False

    async def close(self) -> None:
        await self._client.aclose()


def build_usage_counter(settings: RedisSettings) -> UsageCounter:
    """Create a UsageCounter connected to the configured Redis."""
    client = Redis.from_url(
        settings.url,
        socket_timeout=settings.socket_timeout,
        decode_responses=True,
    )
    return UsageCounter(client)
