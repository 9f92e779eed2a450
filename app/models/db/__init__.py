"""
Database models package.

Domain tables are declared next to their repositories; this package only
holds the shared declarative base.
"""

from .base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
]
