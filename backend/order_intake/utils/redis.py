"""Shared Redis client."""

from functools import lru_cache

from redis.asyncio import Redis

from order_intake.config import settings


@lru_cache(maxsize=1)
def get_redis_client() -> Redis:
    """Shared async Redis client - reuse across all utilities."""
    client: Redis = Redis.from_url(settings.redis_url)
    return client
