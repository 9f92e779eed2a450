"""
Database integrations module.

This module provides Redis connectivity for the application.
"""

from .redis import create_async_redis_client, ping_redis

__all__ = ["create_async_redis_client", "ping_redis"]
