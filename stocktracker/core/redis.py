"""Redis connection pool for the quote cache."""
import asyncio
from typing import Optional
import redis.asyncio as redis
from stocktracker.core.config import settings


# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None
_redis_lock = asyncio.Lock()


async def get_redis() -> Optional[redis.Redis]:
    """Get Redis connection from pool, or None when REDIS_URL is not configured."""
    global _redis_pool

    if not settings.redis_url:
        return None

    # Fast path: pool already initialized
    if _redis_pool is not None:
        return _redis_pool

    # Slow path: need to initialize with lock
    async with _redis_lock:
        # Double-check after acquiring lock
        if _redis_pool is None:
            _redis_pool = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=50
            )
    return _redis_pool


async def close_redis():
    """Close Redis connection pool."""
    global _redis_pool
    async with _redis_lock:
        if _redis_pool:
            await _redis_pool.aclose()
            _redis_pool = None
