"""
Slot Lock Implementations

Serializes check-then-write for one practitioner's day.

- InProcessSlotLock: asyncio locks, correct for a single worker process
- RedisSlotLock: Redis SET NX PX lock, correct across workers

Both give up after a bounded wait and raise SchedulingConflictException
with code SLOT_BUSY instead of blocking indefinitely.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from typing import TYPE_CHECKING

from app.core.domain import SchedulingConflictException

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Redis key prefix
SLOT_LOCK_KEY_PREFIX = "scheduling:slot"

# Lock expiry, releases the key if a worker dies while holding it
DEFAULT_LOCK_TTL_MS = 60 * 1000  # 60 seconds

DEFAULT_ACQUIRE_TIMEOUT_SECONDS = 5.0

# Delete the key only if it still holds our token
RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""


def _busy(practitioner_id: str, scheduled_date: date) -> SchedulingConflictException:
    return SchedulingConflictException(
        practitioner_id=practitioner_id,
        time_slot=scheduled_date.isoformat(),
        message="Practitioner schedule is being modified, please retry",
        code="SLOT_BUSY",
    )


class InProcessSlotLock:
    """
    Per-key asyncio locks.

    Locks are created on demand and dropped once nobody holds or waits for
    them, so the registry does not grow with every practitioner-day seen.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_ACQUIRE_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds
        self._locks: dict[tuple[str, date], asyncio.Lock] = {}
        self._users: dict[tuple[str, date], int] = {}

    @asynccontextmanager
    async def hold(self, practitioner_id: str, scheduled_date: date) -> AsyncIterator[None]:
        key = (practitioner_id, scheduled_date)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1

        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout_seconds)
            except TimeoutError:
                logger.warning(f"Slot lock timeout for practitioner {practitioner_id} on {scheduled_date}")
                raise _busy(practitioner_id, scheduled_date) from None

            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class RedisSlotLock:
    """
    Distributed lock on a Redis key per practitioner-day.

    Acquired with SET NX PX and a random token; released with a
    compare-and-delete script so an expired holder cannot free a lock
    that another worker has since taken.
    """

    def __init__(
        self,
        redis_client: Redis,
        ttl_ms: int = DEFAULT_LOCK_TTL_MS,
        timeout_seconds: float = DEFAULT_ACQUIRE_TIMEOUT_SECONDS,
        retry_interval_seconds: float = 0.05,
    ):
        """
        Initialize lock.

        Args:
            redis_client: Async Redis client instance
            ttl_ms: Key expiry in milliseconds
            timeout_seconds: Maximum time to wait for the lock
            retry_interval_seconds: Pause between acquisition attempts
        """
        self._redis = redis_client
        self.ttl_ms = ttl_ms
        self.timeout_seconds = timeout_seconds
        self.retry_interval_seconds = retry_interval_seconds

    def _get_key(self, practitioner_id: str, scheduled_date: date) -> str:
        """Build Redis key for a practitioner-day."""
        return f"{SLOT_LOCK_KEY_PREFIX}:{practitioner_id}:{scheduled_date.isoformat()}"

    async def _acquire(self, key: str, token: str) -> bool:
        deadline = time.monotonic() + self.timeout_seconds
        while True:
            acquired = await self._redis.set(key, token, nx=True, px=self.ttl_ms)
            if acquired:
                return True
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(self.retry_interval_seconds)

    @asynccontextmanager
    async def hold(self, practitioner_id: str, scheduled_date: date) -> AsyncIterator[None]:
        key = self._get_key(practitioner_id, scheduled_date)
        token = uuid.uuid4().hex

        if not await self._acquire(key, token):
            logger.warning(f"[SLOT_LOCK] Timeout acquiring {key}")
            raise _busy(practitioner_id, scheduled_date)

        logger.debug(f"[SLOT_LOCK] Acquired {key}")
        try:
            yield
        finally:
            released = await self._redis.eval(RELEASE_SCRIPT, 1, key, token)
            if not released:
                logger.warning(f"[SLOT_LOCK] Lock {key} expired before release")
