"""Redis read-through cache for resolved short codes.

A mapping never changes once written, so a cached URL can never be stale;
the TTL only bounds memory use. Any Redis failure is logged and treated as
a miss, so the store stays the source of truth.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

CACHE_KEY_PREFIX = "shortlink:url:"


class RedisCache:
    """Optional cache in front of the mapping store."""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            redis_url: e.g. redis://localhost:6379/0; None disables the cache
            ttl_seconds: Expiry applied to every cached mapping
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = bool(redis_url)
        self.client: Optional[redis.Redis] = None

    @property
    def _usable(self) -> bool:
        return self.enabled and self.client is not None

    async def connect(self) -> None:
        """Connect and ping; an unreachable server disables the cache."""
        if not self.enabled:
            return

        self.client = redis.from_url(self.redis_url, decode_responses=True)
        try:
            await self.client.ping()
        except (RedisError, OSError) as e:
            self.logger.error(f"Redis unavailable at {self.redis_url}, caching disabled: {e}")
            self.enabled = False
            return

        self.logger.info(f"Redis cache connected (ttl={self.ttl_seconds}s)")

    async def ping(self) -> bool:
        if not self._usable:
            return False
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as e:
            self.logger.error(f"Redis ping failed: {e}")
            return False

    async def get(self, key: str) -> Optional[str]:
        """Cached URL for key, or None on a miss or any Redis error."""
        if not self._usable:
            return None
        try:
            return await self.client.get(key)
        except (RedisError, OSError) as e:
            self.logger.warning(f"Redis get {key} failed, falling back to store: {e}")
            return None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Cache value under key; returns False if nothing was written."""
        if not self._usable:
            return False
        try:
            await self.client.setex(key, ttl or self.ttl_seconds, value)
        except (RedisError, OSError) as e:
            self.logger.warning(f"Redis set {key} failed: {e}")
            return False
        return True

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            self.logger.debug("Redis connection closed")

    @staticmethod
    def get_cache_key(short_code: str) -> str:
        return f"{CACHE_KEY_PREFIX}{short_code}"
