"""Concurrency strategies protecting sequence and record-id allocation.

Reading a counter and advancing it, or scanning for a free record id and
inserting with it, are separate round-trips. Without protection two
concurrent requests can observe the same value. Which protection applies is a
per-deployment choice (ALLOCATION_STRATEGY):

- none: no protection, reproduces the race
- mutex: one asyncio.Lock per counter / table, single-process deployments
- redis: distributed lock per counter / table, multi-process deployments
- atomic: no lock; the database arbitrates via compare-and-swap updates and
  primary key conflicts, losers retry with a fresh value
"""

import asyncio
from collections import defaultdict
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from order_intake.config import AllocationStrategy
from order_intake.services.allocation.exceptions import AllocationLockUnavailable
from order_intake.utils.redis_lock import LockUnavailable, RedisLock

logger = structlog.get_logger(__name__)


class AllocationGuard:
    """Base strategy: no locking and no conflict retries."""

    name: AllocationStrategy = "none"
    # When True, allocators detect conflicts at write time and retry
    retry_on_conflict: bool = False

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncGenerator[None]:
        """Hold exclusive access to ``key`` for the duration of the block."""
        yield


class MutexGuard(AllocationGuard):
    """Process-local lock per allocation key."""

    name: AllocationStrategy = "mutex"

    def __init__(self) -> None:
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncGenerator[None]:
        async with self._locks[key]:
            yield


class RedisGuard(AllocationGuard):
    """Distributed lock per allocation key."""

    name: AllocationStrategy = "redis"

    def __init__(self, client: Redis, ttl_ms: int = 5000, max_wait: float = 10.0):
        self.client = client
        self.ttl_ms = ttl_ms
        self.max_wait = max_wait

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncGenerator[None]:
        """Hold the Redis lock for ``key``.

        A lock that cannot be taken (held elsewhere past max_wait, or Redis
        unreachable) raises AllocationLockUnavailable, so the pipeline fails
        the current item only.
        """
        try:
            async with RedisLock(self.client, f"allocation:{key}", self.ttl_ms, max_wait=self.max_wait):
                yield
        except (LockUnavailable, RedisError) as e:
            logger.error("Allocation lock unavailable", key=key, error=str(e))
            raise AllocationLockUnavailable(f"Could not lock {key}: {e}") from e


class AtomicGuard(AllocationGuard):
    """Database-arbitrated allocation: no lock, retry on conflict."""

    name: AllocationStrategy = "atomic"
    retry_on_conflict = True


def build_guard(
    strategy: AllocationStrategy,
    *,
    redis_client_factory: Callable[[], Redis] | None = None,
    lock_ttl_ms: int = 5000,
) -> AllocationGuard:
    """Create the guard for a configured strategy."""
    if strategy == "none":
        logger.warning("Allocation guard disabled, concurrent requests may allocate duplicate ids")
        return AllocationGuard()
    if strategy == "mutex":
        return MutexGuard()
    if strategy == "redis":
        if redis_client_factory is None:
            from order_intake.utils.redis import get_redis_client

            redis_client_factory = get_redis_client
        return RedisGuard(redis_client_factory(), ttl_ms=lock_ttl_ms)
    if strategy == "atomic":
        return AtomicGuard()
    raise ValueError(f"Unknown allocation strategy: {strategy}")
