"""
Base Container - Shared Singletons.

Single Responsibility: Manage process-wide resources (Redis client, slot lock).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.config.settings import Settings, get_settings
from app.domains.visit_scheduling.application.ports import ISlotLock
from app.domains.visit_scheduling.infrastructure.locking import InProcessSlotLock, RedisSlotLock
from app.integrations.databases import create_async_redis_client

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    The slot lock must be shared by every request in the process, otherwise
    two concurrent bookings would each hold their own lock.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize base container.

        Args:
            settings: Optional settings override
        """
        self.settings = settings or get_settings()

        self._redis_instance: Redis | None = None
        self._slot_lock_instance: ISlotLock | None = None

        logger.info("BaseContainer initialized")

    def get_redis(self) -> Redis:
        """Get async Redis client (singleton)."""
        if self._redis_instance is None:
            self._redis_instance = create_async_redis_client(self.settings)
        return self._redis_instance

    def get_slot_lock(self) -> ISlotLock:
        """
        Get the per-(practitioner, date) lock (singleton).

        SCHEDULING_LOCK_BACKEND selects an in-process lock or a Redis lock.
        """
        if self._slot_lock_instance is None:
            if self.settings.SCHEDULING_LOCK_BACKEND == "redis":
                logger.info("Creating RedisSlotLock")
                self._slot_lock_instance = RedisSlotLock(
                    self.get_redis(),
                    ttl_ms=self.settings.SCHEDULING_LOCK_TTL_MS,
                    timeout_seconds=self.settings.SCHEDULING_LOCK_TIMEOUT_SECONDS,
                )
            else:
                logger.info("Creating InProcessSlotLock")
                self._slot_lock_instance = InProcessSlotLock(
                    timeout_seconds=self.settings.SCHEDULING_LOCK_TIMEOUT_SECONDS,
                )
        return self._slot_lock_instance

    async def close(self) -> None:
        """Release shared connections."""
        if self._redis_instance is not None:
            await self._redis_instance.aclose()
            self._redis_instance = None
            logger.info("Redis connection closed")
