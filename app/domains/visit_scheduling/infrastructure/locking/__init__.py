"""
Visit Scheduling Slot Locks
"""

from app.domains.visit_scheduling.infrastructure.locking.slot_lock import (
    InProcessSlotLock,
    RedisSlotLock,
)

__all__ = [
    "InProcessSlotLock",
    "RedisSlotLock",
]
