"""Redis-backed snapshot cache."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from redis.asyncio import Redis

from ..config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Thin async wrapper over Redis. Errors propagate to the caller."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    async def get(self, key: str) -> Optional[bytes]:
        return await self._client.get(key)

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> None:
        await self._client.setex(key, ttl_seconds, value)

    async def delete_pattern(self, pattern: str) -> int:
        keys = [key async for key in self._client.scan_iter(match=pattern)]
        if not keys:
            return 0
        return await self._client.delete(*keys)

    async def ping(self) -> bool:
        return bool(await self._client.ping())


@lru_cache()
def get_cache() -> RedisCache | None:
    """Get cached Redis-backed cache instance, or None when Redis is not configured.

    Note: This does not test the connection - actual commands may fail with network errors.
    """
    if not settings.redis_url:
        logger.warning("Redis not configured (missing URL); product snapshots will not be cached")
        return None

    try:
        client = Redis.from_url(settings.redis_url, socket_connect_timeout=1.0)
        return RedisCache(client)
    except Exception as e:
        logger.error(f"Failed to create Redis client: {e}")
        return None
