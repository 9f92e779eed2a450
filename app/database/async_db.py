"""
Motor y sesiones asíncronas de PostgreSQL para la agenda de visitas.

Los repositorios confirman cada escritura por su cuenta (la reserva debe
quedar persistida antes de liberar el lock de agenda), por lo que la
dependencia de FastAPI solo abre la sesión y revierte ante errores.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import quote_plus

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from app.config.settings import Settings, get_settings
from app.core.domain import DomainException

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_async_database_url(settings: Settings | None = None) -> str:
    """Construye la URL asyncpg a partir de DB_*"""
    settings = settings or get_settings()

    if not settings.DB_NAME:
        raise ValueError("Database name is required (DB_NAME)")

    # Escapar caracteres especiales en credenciales
    credentials = quote_plus(settings.DB_USER)
    if settings.DB_PASSWORD:
        credentials = f"{credentials}:{quote_plus(settings.DB_PASSWORD)}"

    return f"postgresql+asyncpg://{credentials}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"


def create_async_database_engine(settings: Settings | None = None) -> AsyncEngine:
    """Crea el engine asíncrono (NullPool en debug, pool completo en producción)"""
    settings = settings or get_settings()

    engine_config: dict = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
        "connect_args": {
            "server_settings": {"application_name": settings.PROJECT_NAME},
            "command_timeout": settings.DB_COMMAND_TIMEOUT,
        },
    }

    if settings.DEBUG:
        logger.info("Creating async database engine for DEVELOPMENT (NullPool)")
        engine_config["poolclass"] = NullPool
    else:
        logger.info("Creating async database engine for PRODUCTION (AsyncAdaptedQueuePool)")
        engine_config.update(
            poolclass=AsyncAdaptedQueuePool,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )

    try:
        return create_async_engine(get_async_database_url(settings), **engine_config)
    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


def get_async_engine() -> AsyncEngine:
    """Engine compartido del proceso, creado en el primer uso"""
    global _engine
    if _engine is None:
        _engine = create_async_database_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency para obtener la sesión de base de datos asíncrona
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except DomainException:
            # Errores de negocio: se informan al cliente, no son fallas de la base
            await session.rollback()
            raise
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise


@asynccontextmanager
async def get_async_db_context():
    """
    Context manager para scripts y tareas fuera de una request
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise


async def close_async_engine() -> None:
    """Libera las conexiones del pool al apagar la aplicación"""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Async database engine disposed")
