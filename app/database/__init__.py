"""
Database access: async engine, session factory and request dependencies.
"""

from app.database.async_db import (
    close_async_engine,
    get_async_database_url,
    get_async_db,
    get_async_db_context,
    get_async_engine,
    get_session_factory,
)

__all__ = [
    "close_async_engine",
    "get_async_database_url",
    "get_async_db",
    "get_async_db_context",
    "get_async_engine",
    "get_session_factory",
]
