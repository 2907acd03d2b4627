"""Shared Redis client — backs the rate limiter only.

Balances and settings never touch Redis; they live in PostgreSQL and the
in-process SettingsCache. The client is created lazily, so a process that
never rate-limits never connects.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            health_check_interval=30,
        )
    return _client


async def redis_ok() -> bool:
    """PING Redis; False (with a warning) when it is unreachable."""
    try:
        return bool(await (await get_redis()).ping())
    except RedisError as e:
        logger.warning("redis unreachable at %s: %s", settings.REDIS_URL, e)
        return False


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
