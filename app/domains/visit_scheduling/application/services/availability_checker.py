"""
Availability Checker

Answers whether a practitioner can take a candidate slot at a clinic.
Read-only; it does not make the following write atomic. Callers that book
hold an ISlotLock around check and write.
"""

import logging
from datetime import date, time

from app.core.domain import SchedulingConflictException
from app.domains.visit_scheduling.application.ports import IVisitRepository
from app.domains.visit_scheduling.domain.entities import Visit
from app.domains.visit_scheduling.domain.services import find_overlapping_visits
from app.domains.visit_scheduling.domain.value_objects import DEFAULT_DURATION_MINUTES, TimeSlot

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """
    Overlap check against a practitioner's existing visits for one day.

    Example:
        ```python
        checker = AvailabilityChecker(visit_repository)
        free = await checker.is_available("u-7", "c-1", date(2024, 3, 1), "10:15", 30)
        ```
    """

    def __init__(self, visit_repository: IVisitRepository, default_duration_minutes: int = DEFAULT_DURATION_MINUTES):
        self.visit_repo = visit_repository
        self.default_duration_minutes = default_duration_minutes

    async def find_conflicts(
        self,
        practitioner_id: str,
        clinic_id: str,
        scheduled_date: date,
        scheduled_time: str | time,
        duration_minutes: int | None = None,
        exclude_visit_id: str | None = None,
    ) -> list[Visit]:
        """
        Find the visits that overlap a candidate slot.

        Args:
            practitioner_id: Practitioner to check
            clinic_id: Clinic the visit belongs to
            scheduled_date: Calendar day
            scheduled_time: ``HH:MM`` start time
            duration_minutes: Slot length (default applied when None)
            exclude_visit_id: Visit ignored by the scan

        Returns:
            Overlapping visits (empty when the slot is free)

        Raises:
            ValidationException: On malformed time or non-positive duration
        """
        duration = self.default_duration_minutes if duration_minutes is None else duration_minutes
        candidate = TimeSlot.from_schedule(scheduled_date, scheduled_time, duration)

        existing = await self.visit_repo.find_slot_holders(
            practitioner_id=practitioner_id,
            clinic_id=clinic_id,
            scheduled_date=scheduled_date,
            exclude_visit_id=exclude_visit_id,
        )
        return find_overlapping_visits(candidate, existing, exclude_visit_id)

    async def is_available(
        self,
        practitioner_id: str,
        clinic_id: str,
        scheduled_date: date,
        scheduled_time: str | time,
        duration_minutes: int | None = None,
        exclude_visit_id: str | None = None,
    ) -> bool:
        """Check if the candidate slot is free."""
        conflicts = await self.find_conflicts(
            practitioner_id,
            clinic_id,
            scheduled_date,
            scheduled_time,
            duration_minutes,
            exclude_visit_id,
        )
        return not conflicts

    async def ensure_available(
        self,
        practitioner_id: str,
        clinic_id: str,
        scheduled_date: date,
        scheduled_time: str | time,
        duration_minutes: int | None = None,
        exclude_visit_id: str | None = None,
    ) -> None:
        """
        Raise if the candidate slot is taken.

        Raises:
            SchedulingConflictException: If any visit overlaps the slot
        """
        conflicts = await self.find_conflicts(
            practitioner_id,
            clinic_id,
            scheduled_date,
            scheduled_time,
            duration_minutes,
            exclude_visit_id,
        )
        if conflicts:
            duration = self.default_duration_minutes if duration_minutes is None else duration_minutes
            slot = TimeSlot.from_schedule(scheduled_date, scheduled_time, duration)
            logger.warning(
                f"Slot {slot} unavailable for practitioner {practitioner_id} at clinic {clinic_id}: "
                f"overlaps {len(conflicts)} visit(s)"
            )
            raise SchedulingConflictException(
                practitioner_id=practitioner_id,
                time_slot=str(slot),
                conflicting_visit_ids=[visit.id for visit in conflicts if visit.id],
            )
