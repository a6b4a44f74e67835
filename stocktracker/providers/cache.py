"""Redis-backed cache in front of a quote provider."""
import asyncio
import json
import logging
from typing import List, Optional

from redis.exceptions import RedisError

from stocktracker.core.redis import get_redis
from stocktracker.providers import QuoteProvider
from stocktracker.providers.models import Quote

logger = logging.getLogger(__name__)


class CachedQuoteProvider(QuoteProvider):
    """Serve quotes from Redis when fresh, otherwise from the wrapped provider.

    Without a Redis connection (REDIS_URL unset) every call goes upstream.
    Redis errors never fail a request; they are logged and the cache is skipped.
    """

    def __init__(self, provider: QuoteProvider, ttl_seconds: int = 60, key: Optional[str] = None):
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self.key = key or getattr(provider, "cache_key", "quotes")
        self.redis = None
        self._lock = asyncio.Lock()

    async def _get_redis(self):
        """Get Redis connection."""
        if self.redis is None:
            async with self._lock:
                if self.redis is None:
                    self.redis = await get_redis()
        return self.redis

    async def _read(self, redis) -> Optional[List[Quote]]:
        try:
            cached = await redis.get(self.key)
        except RedisError as e:
            logger.warning(f"Quote cache read failed: {e}")
            return None

        if not cached:
            return None

        try:
            return [Quote(**record) for record in json.loads(cached)]
        except (ValueError, TypeError) as e:
            logger.warning(f"Discarding corrupt quote cache entry: {e}")
            return None

    async def _write(self, redis, quotes: List[Quote]) -> None:
        payload = json.dumps([q.to_cache() for q in quotes])
        try:
            await redis.set(self.key, payload, ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(f"Quote cache write failed: {e}")

    async def get_quotes(self) -> List[Quote]:
        redis = await self._get_redis()

        if redis is not None:
            cached = await self._read(redis)
            if cached is not None:
                logger.debug(f"Quote cache hit ({len(cached)} quotes)")
                return cached

        quotes = await self.provider.get_quotes()

        if redis is not None:
            await self._write(redis, quotes)

        return quotes

    async def aclose(self):
        if hasattr(self.provider, "aclose"):
            await self.provider.aclose()
