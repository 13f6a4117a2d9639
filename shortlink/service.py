"""Business logic service for URL shortener."""

import logging
from typing import Optional, Dict, Any

from .shortcode import ShortCodeGenerator
from .database.base import MappingStoreBase
from .database.cache import RedisCache
from .database.models import InsertResult, URLMapping
from .common.validators import is_valid_url
from .errors import InvalidUrlError, NotFoundError, RetriesExhaustedError


class URLShortenerService:
    """Service layer for URL shortening business logic.

    One instance is built at startup and shared by every request task; it
    holds no mutable state of its own.
    """

    def __init__(
        self,
        db: MappingStoreBase,
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_attempts: int = 5,
    ):
        """Initialize URL shortener service.

        Args:
            db: Mapping store instance (already opened)
            cache: Optional cache instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_attempts: Insert attempts per shorten before giving up
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.db = db
        self.cache = cache
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_attempts = max_attempts

    async def shorten(self, original_url: str) -> str:
        """Create a new short URL.

        Each attempt draws a fresh code and tries to insert it; a conflict
        moves on to the next attempt, as does a code reserved for a
        fixed route. The loop is bounded by max_attempts.

        Args:
            original_url: The original long URL, stored verbatim

        Returns:
            The new short code

        Raises:
            InvalidUrlError: If the URL fails validation
            RetriesExhaustedError: If every attempt hit an existing code
            StorageError: On storage engine failure
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise InvalidUrlError(f"Invalid URL: {error}")

        for attempt in range(1, self.max_attempts + 1):
            short_code = self.generator.generate()
            if self.generator.is_reserved(short_code):
                self.logger.warning(
                    f"Reserved short code drawn on attempt {attempt}/{self.max_attempts}: {short_code}"
                )
                continue

            result = await self.db.insert(short_code, original_url)

            if result is InsertResult.CREATED:
                if attempt > 1:
                    self.logger.info(f"Allocated {short_code} after {attempt} attempts")
                await self._cache_mapping(short_code, original_url)
                self.logger.info(f"Created short URL: {short_code} -> {original_url}")
                return short_code

            self.logger.warning(
                f"Short code collision on attempt {attempt}/{self.max_attempts}: {short_code}"
            )

        self.logger.error(f"Giving up after {self.max_attempts} colliding short codes")
        raise RetriesExhaustedError(
            f"Unable to allocate a unique short code after {self.max_attempts} attempts",
            details={"attempts": self.max_attempts},
        )

    async def resolve(self, short_code: str) -> str:
        """Get the original URL for a short code.

        Args:
            short_code: The short code to lookup

        Returns:
            Original URL

        Raises:
            NotFoundError: If no mapping exists
            StorageError: On storage engine failure
        """
        # Codes we could never have issued are a miss without a lookup
        if not ShortCodeGenerator.is_valid_format(short_code):
            raise NotFoundError(f"Short code '{short_code}' not found")

        if self.cache:
            cached_url = await self.cache.get(self.cache.get_cache_key(short_code))
            if cached_url:
                self.logger.debug(f"Cache hit for {short_code}")
                return cached_url

        original_url = await self.db.get(short_code)

        if original_url is None:
            self.logger.info(f"Short code not found: {short_code}")
            raise NotFoundError(f"Short code '{short_code}' not found")

        await self._cache_mapping(short_code, original_url)
        self.logger.debug(f"Retrieved URL: {short_code} -> {original_url}")
        return original_url

    async def get_url_info(self, short_code: str) -> URLMapping:
        """Get the mapping for a short code.

        Raises:
            NotFoundError: If no mapping exists
        """
        original_url = await self.resolve(short_code)
        return URLMapping(short_code=short_code, original_url=original_url)

    async def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "total_urls": await self.db.count(),
            "database": self.db.backend,
            "cache_enabled": self.cache is not None and self.cache.enabled,
        }

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def _cache_mapping(self, short_code: str, original_url: str) -> None:
        if self.cache:
            await self.cache.set(self.cache.get_cache_key(short_code), original_url)

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
        if self.cache:
            await self.cache.close()
