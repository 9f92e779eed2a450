"""
Visit Lifecycle Manager

Books visits and drives them through the status state machine. Every
operation ends in exactly one write; slot-moving operations check
availability under the slot lock strictly before that write.
"""

import logging

from app.core.domain import EntityNotFoundException, ValidationException
from app.domains.visit_scheduling.application.dto import (
    CreateVisitRequest,
    RescheduleVisitRequest,
    UpdateVisitRequest,
)
from app.domains.visit_scheduling.application.ports import (
    IPatientRepository,
    ISlotLock,
    IVisitRepository,
)
from app.domains.visit_scheduling.application.services.availability_checker import AvailabilityChecker
from app.domains.visit_scheduling.domain.entities import Visit
from app.domains.visit_scheduling.domain.value_objects import (
    DEFAULT_DURATION_MINUTES,
    TimeSlot,
    format_time,
    validate_duration,
)

logger = logging.getLogger(__name__)


class VisitLifecycleManager:
    """
    Owner of the Visit state machine.

    Single Responsibility: Create visits and apply lifecycle transitions
    Dependency Inversion: Depends on ports, not on storage or lock backends
    """

    def __init__(
        self,
        visit_repository: IVisitRepository,
        patient_repository: IPatientRepository,
        availability_checker: AvailabilityChecker,
        slot_lock: ISlotLock,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
        max_duration_minutes: int | None = None,
    ):
        """
        Initialize manager with dependencies.

        Args:
            visit_repository: Repository for visit data access
            patient_repository: Patient lookup
            availability_checker: Overlap check for candidate slots
            slot_lock: Per-(practitioner, date) lock held across check and write
            default_duration_minutes: Duration used when a booking omits it
            max_duration_minutes: Longest accepted visit, unbounded when None
        """
        self.visit_repo = visit_repository
        self.patient_repo = patient_repository
        self.availability = availability_checker
        self.slot_lock = slot_lock
        self.default_duration_minutes = default_duration_minutes
        self.max_duration_minutes = max_duration_minutes

    async def get(self, visit_id: str) -> Visit:
        """
        Load a visit.

        Raises:
            EntityNotFoundException: If the visit does not exist
        """
        visit = await self.visit_repo.find_by_id(visit_id)
        if visit is None:
            raise EntityNotFoundException(entity_type="Visit", entity_id=visit_id, message="Visit not found")
        return visit

    def _resolve_duration(self, duration_minutes: int | None) -> int:
        duration = validate_duration(duration_minutes, default=self.default_duration_minutes)
        if self.max_duration_minutes is not None and duration > self.max_duration_minutes:
            raise ValidationException(
                f"Duration cannot exceed {self.max_duration_minutes} minutes",
                field="duration_minutes",
            )
        return duration

    async def create(self, request: CreateVisitRequest) -> Visit:
        """
        Book a new visit in SCHEDULED state.

        Raises:
            ValidationException: On malformed time or duration
            EntityNotFoundException: If the patient does not exist
            SchedulingConflictException: If the practitioner is not available
        """
        # 1. Validate the requested slot
        duration = self._resolve_duration(request.duration_minutes)
        TimeSlot.from_schedule(request.scheduled_date, request.scheduled_time, duration)

        # 2. Verify patient exists
        if not await self.patient_repo.exists(request.patient_id):
            raise EntityNotFoundException(
                entity_type="Patient",
                entity_id=request.patient_id,
                message="Patient not found",
            )

        # 3. Check availability and persist under the slot lock
        async with self.slot_lock.hold(request.practitioner_id, request.scheduled_date):
            await self.availability.ensure_available(
                practitioner_id=request.practitioner_id,
                clinic_id=request.clinic_id,
                scheduled_date=request.scheduled_date,
                scheduled_time=request.scheduled_time,
                duration_minutes=duration,
            )

            visit = Visit.schedule(
                patient_id=request.patient_id,
                clinic_id=request.clinic_id,
                practitioner_id=request.practitioner_id,
                visit_type=request.visit_type,
                scheduled_date=request.scheduled_date,
                scheduled_time=request.scheduled_time,
                duration_minutes=duration,
                chief_complaint=request.chief_complaint,
                parent_visit_id=request.parent_visit_id,
                vital_signs=request.vital_signs,
                created_by=request.created_by,
            )
            saved = await self.visit_repo.add(visit)

        logger.info(
            f"Visit booked: {saved.id} for patient {saved.patient_id} with practitioner "
            f"{saved.practitioner_id} at {saved.slot}"
        )
        return saved

    async def check_in(self, visit_id: str, vital_signs: dict | None = None) -> Visit:
        """Record the patient's arrival."""
        visit = await self.get(visit_id)
        visit.check_in(vital_signs)
        saved = await self.visit_repo.update(visit)
        logger.info(f"Visit {visit_id} checked in")
        return saved

    async def start(self, visit_id: str, vital_signs: dict | None = None) -> Visit:
        """Start treatment on a checked-in visit."""
        visit = await self.get(visit_id)
        visit.start(vital_signs)
        saved = await self.visit_repo.update(visit)
        logger.info(f"Visit {visit_id} started")
        return saved

    async def complete(self, visit_id: str) -> Visit:
        """Complete an in-progress visit."""
        visit = await self.get(visit_id)
        visit.complete()
        saved = await self.visit_repo.update(visit)
        logger.info(f"Visit {visit_id} completed")
        return saved

    async def cancel(self, visit_id: str, reason: str | None, cancelled_by: str | None) -> Visit:
        """Cancel a visit; it stays on record and frees its slot."""
        visit = await self.get(visit_id)
        visit.cancel(reason=reason, cancelled_by=cancelled_by)
        saved = await self.visit_repo.update(visit)
        logger.info(f"Visit {visit_id} cancelled by {cancelled_by}")
        return saved

    async def reschedule(self, request: RescheduleVisitRequest) -> Visit:
        """
        Move a visit to a new date and time.

        The visit itself is excluded from the conflict scan, so it may be
        moved onto a slot that overlaps its current one.

        Raises:
            InvalidOperationException: If the visit is completed, cancelled or no-show
            SchedulingConflictException: If the new slot is taken
        """
        visit = await self.get(request.visit_id)
        visit.ensure_reschedulable()

        duration = (
            visit.duration_minutes
            if request.duration_minutes is None
            else self._resolve_duration(request.duration_minutes)
        )
        TimeSlot.from_schedule(request.scheduled_date, request.scheduled_time, duration)

        async with self.slot_lock.hold(visit.practitioner_id, request.scheduled_date):
            await self.availability.ensure_available(
                practitioner_id=visit.practitioner_id,
                clinic_id=visit.clinic_id,
                scheduled_date=request.scheduled_date,
                scheduled_time=request.scheduled_time,
                duration_minutes=duration,
                exclude_visit_id=visit.id,
            )
            visit.reschedule(request.scheduled_date, request.scheduled_time, request.duration_minutes)
            saved = await self.visit_repo.update(visit)

        logger.info(f"Visit {visit.id} rescheduled to {saved.slot}")
        return saved

    async def update(self, request: UpdateVisitRequest) -> Visit:
        """
        Apply a partial update.

        Changing date, time, duration or practitioner re-runs the availability
        check (excluding the visit itself) before anything is written.
        """
        visit = await self.get(request.visit_id)
        visit.ensure_editable()

        if not request.moves_slot:
            visit.update_details(
                visit_type=request.visit_type,
                chief_complaint=request.chief_complaint,
                parent_visit_id=request.parent_visit_id,
                vital_signs=request.vital_signs,
            )
            saved = await self.visit_repo.update(visit)
            logger.info(f"Visit {visit.id} updated")
            return saved

        practitioner_id = request.practitioner_id or visit.practitioner_id
        scheduled_date = request.scheduled_date or visit.scheduled_date
        scheduled_time = request.scheduled_time or format_time(visit.scheduled_time)
        duration = (
            visit.duration_minutes
            if request.duration_minutes is None
            else self._resolve_duration(request.duration_minutes)
        )
        TimeSlot.from_schedule(scheduled_date, scheduled_time, duration)

        async with self.slot_lock.hold(practitioner_id, scheduled_date):
            await self.availability.ensure_available(
                practitioner_id=practitioner_id,
                clinic_id=visit.clinic_id,
                scheduled_date=scheduled_date,
                scheduled_time=scheduled_time,
                duration_minutes=duration,
                exclude_visit_id=visit.id,
            )
            visit.update_details(
                practitioner_id=request.practitioner_id,
                visit_type=request.visit_type,
                chief_complaint=request.chief_complaint,
                parent_visit_id=request.parent_visit_id,
                vital_signs=request.vital_signs,
            )
            visit.reschedule(scheduled_date, scheduled_time, duration)
            saved = await self.visit_repo.update(visit)

        logger.info(f"Visit {visit.id} updated and moved to {saved.slot}")
        return saved
