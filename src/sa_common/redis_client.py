"""Redis client: holds live auction session snapshots.

Team purses and player records never live here; those go through PostgreSQL.
The pool is created lazily so importing this module never opens a connection.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _redis  # noqa: PLW0603
    if _redis is None:
        _redis = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=30,
        )
    return _redis


async def ping_redis() -> None:
    """Fail fast at startup when Redis is unreachable."""
    redis = await get_redis()
    await redis.ping()


async def close_redis() -> None:
    global _redis  # noqa: PLW0603
    if _redis is not None:
        await _redis.aclose()
        _redis = None
