"""Redis-based distributed locking utilities."""

import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError
from tenacity import AsyncRetrying, retry_if_result, stop_after_delay, wait_random

logger = structlog.get_logger(__name__)

# Delete the key only if it still holds our token (the TTL may have expired
# and another holder may own it now).
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class LockUnavailable(Exception):
    """Raised when the lock cannot be acquired within max_wait."""

    pass


@asynccontextmanager
async def RedisLock(
    client: Redis,
    key: str,
    ttl_ms: int = 5000,
    *,
    max_wait: float = 10.0,
) -> AsyncGenerator[None]:
    """Distributed lock using Redis SET NX PX with an owner token.

    Acquisition is polled until ``max_wait`` seconds pass, then
    LockUnavailable is raised and the block does not run.

    Usage:
        async with RedisLock(client, "sequence:Sale_1", ttl_ms=5000):
            value = await allocator.peek_next("Sale_1")
            await allocator.advance("Sale_1")

    Args:
        client: Async Redis client
        key: Redis key for the lock (will be prefixed with "RedisLock:")
        ttl_ms: Time-to-live in milliseconds, bounds how long a crashed holder blocks others
        max_wait: Seconds to keep retrying acquisition
    """
    full_key = f"RedisLock:{key}"
    token = secrets.token_hex(16)

    retrying = AsyncRetrying(
        retry=retry_if_result(lambda acquired: not acquired),
        stop=stop_after_delay(max_wait),
        wait=wait_random(min=0.01, max=0.05),
        retry_error_callback=lambda retry_state: False,
    )
    acquired = bool(await retrying(client.set, full_key, token, nx=True, px=ttl_ms))
    if not acquired:
        raise LockUnavailable(f"Could not acquire lock: {full_key}")

    try:
        yield
    finally:
        try:
            await client.eval(_RELEASE_SCRIPT, 1, full_key, token)
        except RedisError as e:
            # The key expires after ttl_ms anyway
            logger.warning("Lock release failed", key=full_key, error=str(e))


# Attach exception to function for convenient access
RedisLock.LockUnavailable = LockUnavailable  # type: ignore[attr-defined]
