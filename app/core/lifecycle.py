"""
Application lifecycle management using modern FastAPI lifespan pattern.

This module follows SRP by handling only application startup/shutdown logic.
Uses the modern `lifespan` context manager instead of deprecated on_event decorators.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config.settings import get_settings
from app.core.container import get_container
from app.database import close_async_engine
from app.integrations.databases import ping_redis

logger = logging.getLogger(__name__)
settings = get_settings()


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self) -> None:
        self._initialized = False

    async def startup(self) -> None:
        """
        Execute startup tasks.

        Called when the application starts.
        """
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")

        self._verify_configurations()
        await self._verify_external_services()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        """
        Execute shutdown tasks.

        Called when the application stops.
        """
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")

        await get_container().close()
        await close_async_engine()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        """Log the scheduling configuration in effect."""
        logger.info(
            f"Scheduling lock backend: {settings.SCHEDULING_LOCK_BACKEND} "
            f"(timeout={settings.SCHEDULING_LOCK_TIMEOUT_SECONDS}s)"
        )
        if settings.SCHEDULING_LOCK_BACKEND == "memory" and not settings.is_development:
            logger.warning(
                "In-process slot lock only serializes bookings within one worker; "
                "use SCHEDULING_LOCK_BACKEND=redis when running several workers"
            )

    async def _verify_external_services(self) -> None:
        """Verify connectivity with external services."""
        if settings.SCHEDULING_LOCK_BACKEND != "redis":
            return

        client = get_container().get_redis()
        if await ping_redis(client):
            logger.info(f"Redis connectivity verified: {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        else:
            logger.warning("Redis connectivity failed - bookings will fail with SLOT_BUSY")


# Global lifecycle manager instance
_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()

    await lifecycle.startup()

    yield

    await lifecycle.shutdown()
