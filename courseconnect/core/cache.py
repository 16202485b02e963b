"""Shadow cache for profile data.

Every successful profile read or write is mirrored under
``profileData_{user_id}`` so the profile can still be shown when the database
is unreachable. Redis is used when enabled and reachable; otherwise the
cache keeps entries in process memory. Cache errors are logged and never
fail the request.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import redis.asyncio as aioredis

from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger

logger = get_logger(__name__)


def profile_key(user_id: int | str) -> str:
    return f"profileData_{user_id}"


class ProfileCache:
    def __init__(self, redis_url: Optional[str] = None, *, enabled: bool = False):
        self._redis_url = redis_url
        self._enabled = enabled and bool(redis_url)
        self._client: Optional[aioredis.Redis] = None
        self._connected = False
        self._memory_cache: dict[str, str] = {}

    @property
    def backend(self) -> str:
        return "redis" if self._client is not None else "memory"

    async def _redis(self) -> Optional[aioredis.Redis]:
        if not self._enabled:
            return None
        if self._connected:
            return self._client
        self._connected = True
        try:
            client = aioredis.from_url(self._redis_url, decode_responses=True)
            await client.ping()
            self._client = client
            logger.info("Redis cache connected successfully")
        except Exception as e:
            logger.warning(f"Redis not available, using in-memory cache: {e}")
            self._client = None
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        try:
            client = await self._redis()
            raw = await client.get(key) if client else self._memory_cache.get(key)
            return json.loads(raw) if raw else None
        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        expire = expire or settings.redis.profile_ttl_seconds
        try:
            raw = json.dumps(value, default=str)
            client = await self._redis()
            if client:
                return bool(await client.setex(key, expire, raw))
            self._memory_cache[key] = raw
            return True
        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            client = await self._redis()
            if client:
                return bool(await client.delete(key))
            return self._memory_cache.pop(key, None) is not None
        except Exception as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._connected = False


# Global cache instance
profile_cache = ProfileCache(str(settings.redis.dsn), enabled=settings.redis.enabled)
