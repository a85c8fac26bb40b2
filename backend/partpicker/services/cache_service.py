"""Redis-backed cache of retailer HTML pages.

Listing pages are kept for ``PAGE_CACHE_TTL_SECONDS`` so repeated browse
requests within that window hit each storefront once. Redis being down only
costs the cache: reads miss and writes are dropped.
"""

import hashlib
from typing import Optional

import structlog
from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from partpicker.config import settings

logger = structlog.get_logger(__name__)


def page_cache_key(url: str) -> str:
    return "page:" + hashlib.sha1(url.encode("utf-8")).hexdigest()


class PageCache:
    """Async page cache keyed by URL."""

    def __init__(self, redis_url: str, default_ttl: int = 300):
        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self._redis: Optional[Redis] = None
        self.logger = logger.bind(service="page_cache")

    def _client(self) -> Redis:
        if self._redis is None:
            self._redis = from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            self.logger.info("redis_client_created", url=self.redis_url)
        return self._redis

    async def get_page(self, url: str) -> Optional[str]:
        key = page_cache_key(url)
        try:
            html = await self._client().get(key)
        except (RedisError, OSError) as e:
            self.logger.warning("page_cache_read_failed", url=url, error=str(e))
            return None

        self.logger.debug("page_cache_hit" if html else "page_cache_miss", url=url)
        return html or None

    async def set_page(self, url: str, html: str, ttl: Optional[int] = None) -> bool:
        """Store ``html`` for ``url``; returns False when Redis rejected the write."""
        if not html:
            return False
        try:
            await self._client().set(page_cache_key(url), html, ex=ttl or self.default_ttl)
        except (RedisError, OSError) as e:
            self.logger.warning("page_cache_write_failed", url=url, error=str(e))
            return False
        return True

    async def health_check(self) -> bool:
        try:
            await self._client().ping()
            return True
        except Exception as e:
            self.logger.error("redis_health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            self.logger.info("redis_client_closed")


_page_cache: Optional[PageCache] = None


def get_cache_service() -> Optional[PageCache]:
    """Shared page cache, or None when ``CACHE_ENABLED`` is off."""
    global _page_cache

    if not settings.CACHE_ENABLED:
        return None

    if _page_cache is None:
        _page_cache = PageCache(settings.REDIS_URL, default_ttl=settings.PAGE_CACHE_TTL_SECONDS)
    return _page_cache
