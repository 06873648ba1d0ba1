from typing import Optional
from redis import asyncio as aioredis
from redis.exceptions import RedisError
from schoolportal.core.config import settings
from schoolportal.core.logging import logger

# Redis connection settings
REDIS_URL = settings.REDIS_URL
REVOKED_TOKEN_PREFIX = "revoked"

redis_client: Optional[aioredis.Redis] = None

async def init_redis() -> Optional[aioredis.Redis]:
    """
    Initialize Redis connection.

    A failed connection leaves ``redis_client`` unset; requests then run
    without the cache and the next ``get_redis`` call tries again.
    """
    global redis_client
    client = aioredis.from_url(
        REDIS_URL,
        decode_responses=True
    )
    try:
        # Test connection
        await client.ping()
    except (RedisError, OSError) as e:
        logger.error(f"Failed to connect to Redis, continuing without cache: {str(e)}")
        await client.aclose()
        redis_client = None
        return None
    redis_client = client
    logger.info("Redis connection established successfully")
    return redis_client

async def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")

async def get_redis() -> Optional[aioredis.Redis]:
    """Get Redis client instance, or None while Redis is unreachable"""
    if not redis_client:
        return await init_redis()
    return redis_client
