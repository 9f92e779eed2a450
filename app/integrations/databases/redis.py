"""
Redis Integration

Provides the async Redis client used by the distributed slot lock.
"""

import logging

import redis.asyncio as aioredis

from app.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_async_redis_client(settings: Settings | None = None) -> aioredis.Redis:
    """
    Create async Redis client instance.

    The connection is opened lazily on the first command.

    Args:
        settings: Optional settings override

    Returns:
        Async Redis client instance
    """
    settings = settings or get_settings()

    client = aioredis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
        decode_responses=True,
    )
    logger.info(f"Async Redis client created: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    return client


async def ping_redis(client: aioredis.Redis) -> bool:
    """
    Check Redis connectivity.

    Returns:
        True when the server answered PING
    """
    try:
        await client.ping()
        return True
    except aioredis.RedisError as e:
        logger.error(f"Async Redis connection failed: {e}")
        return False
