"""
Slot Lock Port

Mutual exclusion over one practitioner's calendar day, held from the
availability check until the booking write has been committed.
"""

from contextlib import AbstractAsyncContextManager
from datetime import date
from typing import Protocol, runtime_checkable


@runtime_checkable
class ISlotLock(Protocol):
    """Per-(practitioner, date) lock."""

    def hold(self, practitioner_id: str, scheduled_date: date) -> AbstractAsyncContextManager[None]:
        """
        Acquire the lock for a practitioner's day.

        Usage:
            async with slot_lock.hold(practitioner_id, scheduled_date):
                ...check availability and write...

        Raises:
            SchedulingConflictException: If the lock cannot be acquired in time
        """
        ...
