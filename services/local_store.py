"""
Redis-backed local cache for per-user favorites snapshots.

The cache is best effort. Without a Redis client, or when Redis errors,
reads return None and writes are dropped with a warning.
"""

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .data_store import LocalStore

logger = logging.getLogger(__name__)


class RedisLocalStore(LocalStore):
    """LocalStore over a redis.asyncio client (or none)."""

    def __init__(self, redis: Redis | None = None, ttl_seconds: int | None = None):
        self._redis = redis
        self._ttl = ttl_seconds

    @property
    def is_available(self) -> bool:
        return self._redis is not None

    async def get(self, key: str) -> str | None:
        if self._redis is None:
            return None
        try:
            value = await self._redis.get(key)
        except RedisError as e:
            logger.warning(f"Local cache read failed for {key}: {e}")
            return None
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str) -> None:
        if self._redis is None:
            logger.debug(f"No local cache configured, dropping write to {key}")
            return
        try:
            if self._ttl:
                await self._redis.setex(key, self._ttl, value)
            else:
                await self._redis.set(key, value)
        except RedisError as e:
            logger.warning(f"Local cache write failed for {key}: {e}")
