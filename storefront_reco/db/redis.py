# storefront_reco/db/redis.py
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError
from storefront_reco.core.config import get_settings

logger = logging.getLogger(__name__)

redis_client: redis.Redis | None = None


async def connect():
    """
    Connect Redis if REDIS_URL is set.
    Missing or unreachable Redis only disables the embedding cache.
    """
    global redis_client
    settings = get_settings()
    if not settings.REDIS_URL:
        logger.info("No REDIS_URL configured, embedding cache disabled")
        redis_client = None
        return

    try:
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        await client.ping()
        redis_client = client
        logger.info("Redis connection successful")
    except RedisError as e:
        logger.warning(f"Failed to connect to Redis, embedding cache disabled: {e}")
        redis_client = None


async def disconnect():
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis disconnected")


def get_redis() -> redis.Redis | None:
    """
    Redis client, or None when not configured/unavailable.
    Callers must handle None.
    """
    return redis_client
