"""
Redis Client Management
Handles the async Redis connection backing the vector database
"""

from functools import lru_cache

import redis.asyncio as redis
from loguru import logger

from ..config import settings


@lru_cache(maxsize=1)
def get_redis_client() -> redis.Redis:
    """
    Get Redis client singleton
    
    The connection is lazy; call check_redis_health() to verify it.
    """
    client = redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        password=settings.REDIS_PASSWORD if settings.REDIS_PASSWORD else None,
        db=settings.REDIS_DB,
        decode_responses=False,  # Keep as bytes for vector operations
        socket_timeout=5,
        socket_connect_timeout=5
    )
    
    logger.info(
        f"Redis client configured: {settings.REDIS_HOST}:{settings.REDIS_PORT} "
        f"(DB: {settings.REDIS_DB})"
    )
    
    return client


async def check_redis_health(client: redis.Redis) -> bool:
    """
    Check if Redis is healthy
    
    Returns:
        bool: True if Redis is accessible
    """
    try:
        await client.ping()
        return True
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        return False
