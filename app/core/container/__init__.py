"""
Dependency Injection Container.

Centralized container for creating and managing all application dependencies.
Implements Dependency Inversion Principle by wiring concrete implementations to interfaces.

This module is the facade that composes the domain-specific containers.
"""

from __future__ import annotations

import logging

from app.config.settings import Settings
from app.domains.visit_scheduling.application.ports import ISlotLock
from app.domains.visit_scheduling.application.services import SchedulingService

from .base import BaseContainer
from .scheduling import SchedulingContainer

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency Injection Container (Facade).

    Single Responsibility: Compose and delegate to domain-specific containers.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize container with all domain sub-containers.

        Args:
            settings: Optional settings override
        """
        self._base = BaseContainer(settings)
        self._scheduling = SchedulingContainer(self._base)

        logger.info("DependencyContainer initialized")

    @property
    def settings(self) -> Settings:
        return self._base.settings

    # ============================================================
    # SINGLETONS (delegated to BaseContainer)
    # ============================================================

    def get_redis(self):
        return self._base.get_redis()

    def get_slot_lock(self) -> ISlotLock:
        return self._base.get_slot_lock()

    async def close(self) -> None:
        await self._base.close()

    # ============================================================
    # VISIT SCHEDULING (delegated to SchedulingContainer)
    # ============================================================

    def create_visit_repository(self, db):
        return self._scheduling.create_visit_repository(db)

    def create_note_repository(self, db):
        return self._scheduling.create_note_repository(db)

    def create_scheduling_service(self, db) -> SchedulingService:
        return self._scheduling.create_scheduling_service(db)


# Global container instance
_container: DependencyContainer | None = None


def get_container(settings: Settings | None = None) -> DependencyContainer:
    """
    Get global container instance (singleton).

    Args:
        settings: Optional settings (only used on first call)

    Returns:
        DependencyContainer instance
    """
    global _container

    if _container is None:
        logger.info("Initializing global DependencyContainer")
        _container = DependencyContainer(settings)
    elif settings is not None:
        logger.warning(
            "Container already initialized, ignoring new settings. "
            "Call reset_container() first to change configuration."
        )

    return _container


def reset_container() -> None:
    """
    Reset global container instance.

    Useful for testing or reconfiguration.
    """
    global _container
    logger.info("Resetting global DependencyContainer")
    _container = None


__all__ = [
    "DependencyContainer",
    "BaseContainer",
    "SchedulingContainer",
    "get_container",
    "reset_container",
]
