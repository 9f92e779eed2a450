"""
Visit Scheduling API Dependencies

FastAPI dependencies for the visit scheduling domain.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.container import get_container
from app.database.async_db import get_async_db
from app.domains.visit_scheduling.application.services import SchedulingService

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_async_db)]


def get_scheduling_service(db: DbSession) -> SchedulingService:
    """Get SchedulingService instance with database session."""
    container = get_container()
    return container.create_scheduling_service(db)


def get_optional_user_id(x_user_id: Annotated[str | None, Header(alias="X-User-ID")] = None) -> str | None:
    """Acting user, when the caller identifies itself."""
    return x_user_id or None


def get_current_user_id(user_id: Annotated[str | None, Depends(get_optional_user_id)]) -> str:
    """Acting user; required for note authoring and signing."""
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header is required",
        )
    return user_id


SchedulingServiceDep = Annotated[SchedulingService, Depends(get_scheduling_service)]
OptionalUserId = Annotated[str | None, Depends(get_optional_user_id)]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]


__all__ = [
    "DbSession",
    "get_scheduling_service",
    "get_optional_user_id",
    "get_current_user_id",
    "SchedulingServiceDep",
    "OptionalUserId",
    "CurrentUserId",
]
