"""
Redis connection management.

Redis backs the per-user local favorites cache. It is optional: when the
server cannot reach Redis the cache degrades to a no-op.
"""

import logging
import time
from typing import Optional

from redis.asyncio import ConnectionPool, Redis

from .config import get_settings

logger = logging.getLogger(__name__)

# Global connection pool
_pool: Optional[ConnectionPool] = None
_client: Optional[Redis] = None


async def init_redis() -> Redis:
    """
    Initialize Redis connection pool and client.

    Should be called during application startup.
    """
    global _pool, _client

    settings = get_settings()

    _pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=True,
    )
    client = Redis(connection_pool=_pool)

    try:
        await client.ping()
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        await _pool.disconnect()
        _pool = None
        raise

    _client = client
    logger.info("Redis connection established successfully")
    return _client


async def close_redis() -> None:
    """
    Close Redis connection pool.

    Should be called during application shutdown.
    """
    global _pool, _client

    if _client:
        await _client.aclose()
        _client = None
        logger.info("Redis connection closed")

    if _pool:
        await _pool.disconnect()
        _pool = None


def get_redis() -> Optional[Redis]:
    """Get the Redis client, or None when Redis was not initialized."""
    return _client


class RedisHealthCheck:
    """Redis health check utility."""

    @staticmethod
    async def check() -> dict:
        """
        Check Redis health status.

        Returns:
            Dictionary with health status and latency
        """
        client = get_redis()
        if client is None:
            return {
                "status": "not_initialized",
                "latency_ms": None,
            }

        try:
            start = time.perf_counter()
            await client.ping()
            latency_ms = (time.perf_counter() - start) * 1000
            return {
                "status": "healthy",
                "latency_ms": round(latency_ms, 2),
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "latency_ms": None,
            }
