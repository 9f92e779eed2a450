"""
Unit tests for VisitLifecycleManager.

Covers booking, the lifecycle transitions, rescheduling and partial
updates over in-memory repositories and the in-process slot lock.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, timedelta

import pytest

from app.core.domain import (
    EntityNotFoundException,
    InvalidOperationException,
    SchedulingConflictException,
    ValidationException,
)
from app.domains.visit_scheduling.application.dto import (
    CreateVisitRequest,
    RescheduleVisitRequest,
    UpdateVisitRequest,
)
from app.domains.visit_scheduling.domain.value_objects import VisitStatus, VisitType, format_time
from tests.utils import (
    CLINIC_ID,
    PATIENT_ID,
    PRACTITIONER_ID,
    VISIT_DATE,
    assert_no_double_booking,
)


def booking(scheduled_time: str, duration_minutes: int | None = 30, **overrides) -> CreateVisitRequest:
    data = {
        "patient_id": PATIENT_ID,
        "clinic_id": CLINIC_ID,
        "practitioner_id": PRACTITIONER_ID,
        "visit_type": VisitType.FOLLOW_UP,
        "scheduled_date": VISIT_DATE,
        "scheduled_time": scheduled_time,
        "duration_minutes": duration_minutes,
    }
    data.update(overrides)
    return CreateVisitRequest(**data)


# ============================================================================
# CreateVisit
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_visit_success(lifecycle_manager, visit_repository):
    # Act
    visit = await lifecycle_manager.create(
        booking("10:00", chief_complaint="Lower back pain", created_by="reception-1")
    )

    # Assert
    assert visit.status == VisitStatus.SCHEDULED
    assert format_time(visit.scheduled_time) == "10:00"
    assert visit.duration_minutes == 30
    assert visit.created_by == "reception-1"
    assert len(visit_repository) == 1


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_visit_defaults_duration(lifecycle_manager):
    visit = await lifecycle_manager.create(booking("10:00", duration_minutes=None))

    assert visit.duration_minutes == 30


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_create_visit_unknown_patient(lifecycle_manager, visit_repository):
    with pytest.raises(EntityNotFoundException) as exc_info:
        await lifecycle_manager.create(booking("10:00", patient_id="ghost"))

    assert exc_info.value.message == "Patient not found"
    assert len(visit_repository) == 0


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "scheduled_time,duration", [("25:00", 30), ("10:00", 0), ("10:00", -30), ("10:00", 481), ("23:30", 60)]
)
async def test_create_visit_invalid_slot(lifecycle_manager, visit_repository, scheduled_time, duration):
    with pytest.raises(ValidationException):
        await lifecycle_manager.create(booking(scheduled_time, duration))

    assert len(visit_repository) == 0


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_late_visit_cannot_spill_into_next_day(lifecycle_manager, visit_repository):
    """A 23:30 visit of one hour would overlap the next day's 00:00 visit."""
    next_day = VISIT_DATE + timedelta(days=1)

    # Act
    with pytest.raises(ValidationException) as exc_info:
        await lifecycle_manager.create(booking("23:30", 60))
    last = await lifecycle_manager.create(booking("23:30", 30))
    first = await lifecycle_manager.create(booking("00:00", 30, scheduled_date=next_day))

    # Assert
    assert exc_info.value.field == "duration_minutes"
    assert str(last.slot) == f"{VISIT_DATE.isoformat()} 23:30-00:00"
    assert not last.slot.overlaps_with(first.slot)
    assert len(visit_repository) == 2
    assert_no_double_booking(visit_repository.all())


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_booking_scenarios(lifecycle_manager, visit_repository):
    """Cancelling frees only the cancelled visit's slot; 10:15 still overlaps 10:30."""
    # 1. First booking
    first = await lifecycle_manager.create(booking("10:00"))

    # 2. Overlapping booking is rejected
    with pytest.raises(SchedulingConflictException) as exc_info:
        await lifecycle_manager.create(booking("10:15"))
    assert exc_info.value.conflicting_visit_ids == [first.id]

    # 3. Back-to-back booking succeeds
    await lifecycle_manager.create(booking("10:30"))

    # 4. Cancelling frees the slot
    await lifecycle_manager.cancel(first.id, reason="Patient request", cancelled_by="reception-1")
    with pytest.raises(SchedulingConflictException):
        # 10:15-10:45 still overlaps the 10:30 visit
        await lifecycle_manager.create(booking("10:15"))
    moved = await lifecycle_manager.create(booking("10:00", 30))

    assert moved.status == VisitStatus.SCHEDULED
    assert_no_double_booking(visit_repository.all())


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancelled_slot_can_be_rebooked_with_overlap(lifecycle_manager):
    first = await lifecycle_manager.create(booking("10:00"))
    await lifecycle_manager.cancel(first.id, reason=None, cancelled_by=None)

    second = await lifecycle_manager.create(booking("10:15"))

    assert format_time(second.scheduled_time) == "10:15"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_concurrent_bookings_for_same_slot(lifecycle_manager, visit_repository):
    # Act
    results = await asyncio.gather(
        *(lifecycle_manager.create(booking(t)) for t in ("10:00", "10:10", "10:20", "10:00")),
        return_exceptions=True,
    )

    # Assert
    booked = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, Exception)]
    assert len(booked) == 1
    assert all(isinstance(r, SchedulingConflictException) for r in rejected)
    assert len(visit_repository) == 1
    assert_no_double_booking(visit_repository.all())


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_slot_lock_timeout_is_reported_as_busy(visit_repository, patient_repository, availability_checker):
    from app.domains.visit_scheduling.application.services import VisitLifecycleManager
    from app.domains.visit_scheduling.infrastructure.locking import InProcessSlotLock

    # Arrange
    lock = InProcessSlotLock(timeout_seconds=0.05)
    manager = VisitLifecycleManager(visit_repository, patient_repository, availability_checker, lock)

    # Act
    async with lock.hold(PRACTITIONER_ID, VISIT_DATE):
        with pytest.raises(SchedulingConflictException) as exc_info:
            await manager.create(booking("10:00"))

    # Assert
    assert exc_info.value.code == "SLOT_BUSY"
    assert len(visit_repository) == 0


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_availability_runs_under_the_lock(visit_repository, patient_repository, availability_checker):
    from app.domains.visit_scheduling.application.services import VisitLifecycleManager

    events: list[str] = []

    class RecordingLock:
        @asynccontextmanager
        async def hold(self, practitioner_id, scheduled_date):
            events.append(f"lock {practitioner_id} {scheduled_date}")
            yield
            events.append(f"unlock {practitioner_id} {scheduled_date}")

    original = visit_repository.add

    async def recording_add(visit):
        events.append("write")
        return await original(visit)

    visit_repository.add = recording_add
    manager = VisitLifecycleManager(visit_repository, patient_repository, availability_checker, RecordingLock())

    await manager.create(booking("10:00"))

    assert events == [f"lock {PRACTITIONER_ID} {VISIT_DATE}", "write", f"unlock {PRACTITIONER_ID} {VISIT_DATE}"]


# ============================================================================
# Transitions
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_check_in_start_complete(lifecycle_manager):
    # Arrange
    visit = await lifecycle_manager.create(booking("10:00"))

    # Act
    checked_in = await lifecycle_manager.check_in(visit.id, {"bp": "120/80"})
    started = await lifecycle_manager.start(visit.id, {"pain": 4})
    completed = await lifecycle_manager.complete(visit.id)

    # Assert
    assert checked_in.status == VisitStatus.SCHEDULED
    assert checked_in.check_in_time is not None
    assert started.status == VisitStatus.IN_PROGRESS
    assert completed.status == VisitStatus.COMPLETED
    assert completed.vital_signs == {"bp": "120/80", "pain": 4}
    assert completed.end_time is not None


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_start_without_check_in_fails(lifecycle_manager, visit_repository):
    visit = await lifecycle_manager.create(booking("10:00"))

    with pytest.raises(InvalidOperationException):
        await lifecycle_manager.start(visit.id)

    stored = await visit_repository.find_by_id(visit.id)
    assert stored.status == VisitStatus.SCHEDULED


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_after_complete_fails(lifecycle_manager, visit_repository):
    # Arrange
    visit = await lifecycle_manager.create(booking("10:00"))
    await lifecycle_manager.check_in(visit.id)
    await lifecycle_manager.start(visit.id)
    await lifecycle_manager.complete(visit.id)

    # Act / Assert
    with pytest.raises(InvalidOperationException) as exc_info:
        await lifecycle_manager.cancel(visit.id, reason="too late", cancelled_by="reception-1")

    assert exc_info.value.message == "Cannot cancel a completed visit"
    stored = await visit_repository.find_by_id(visit.id)
    assert stored.status == VisitStatus.COMPLETED


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["get", "check_in", "start", "complete"])
async def test_unknown_visit_is_not_found(lifecycle_manager, operation):
    with pytest.raises(EntityNotFoundException) as exc_info:
        await getattr(lifecycle_manager, operation)("missing")

    assert exc_info.value.message == "Visit not found"


# ============================================================================
# Reschedule / Update
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_onto_overlapping_own_slot(lifecycle_manager):
    visit = await lifecycle_manager.create(booking("10:00", 60))

    moved = await lifecycle_manager.reschedule(
        RescheduleVisitRequest(visit_id=visit.id, scheduled_date=VISIT_DATE, scheduled_time="10:30")
    )

    assert format_time(moved.scheduled_time) == "10:30"
    assert moved.duration_minutes == 60
    assert moved.status == VisitStatus.SCHEDULED


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_into_taken_slot_fails(lifecycle_manager, visit_repository):
    await lifecycle_manager.create(booking("10:00"))
    other = await lifecycle_manager.create(booking("11:00"))

    with pytest.raises(SchedulingConflictException):
        await lifecycle_manager.reschedule(
            RescheduleVisitRequest(visit_id=other.id, scheduled_date=VISIT_DATE, scheduled_time="10:15")
        )

    stored = await visit_repository.find_by_id(other.id)
    assert format_time(stored.scheduled_time) == "11:00"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_reschedule_cancelled_visit_fails(lifecycle_manager):
    visit = await lifecycle_manager.create(booking("10:00"))
    await lifecycle_manager.cancel(visit.id, reason=None, cancelled_by=None)

    with pytest.raises(InvalidOperationException):
        await lifecycle_manager.reschedule(
            RescheduleVisitRequest(visit_id=visit.id, scheduled_date=date(2024, 3, 2), scheduled_time="09:00")
        )


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_update_without_slot_change_skips_availability(lifecycle_manager):
    visit = await lifecycle_manager.create(booking("10:00", vital_signs={"weight_kg": 70}))

    updated = await lifecycle_manager.update(
        UpdateVisitRequest(visit_id=visit.id, chief_complaint="Shoulder", vital_signs={"height_cm": 170})
    )

    assert updated.chief_complaint == "Shoulder"
    assert updated.vital_signs == {"weight_kg": 70, "height_cm": 170}
    assert format_time(updated.scheduled_time) == "10:00"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_update_practitioner_rechecks_target_calendar(lifecycle_manager):
    # Arrange
    await lifecycle_manager.create(booking("10:00", practitioner_id="physio-2"))
    visit = await lifecycle_manager.create(booking("10:00"))

    # Act / Assert
    with pytest.raises(SchedulingConflictException):
        await lifecycle_manager.update(UpdateVisitRequest(visit_id=visit.id, practitioner_id="physio-2"))

    moved = await lifecycle_manager.update(
        UpdateVisitRequest(visit_id=visit.id, practitioner_id="physio-2", scheduled_time="10:30")
    )
    assert moved.practitioner_id == "physio-2"
    assert format_time(moved.scheduled_time) == "10:30"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_update_duration_extension_conflicts(lifecycle_manager):
    visit = await lifecycle_manager.create(booking("10:00"))
    await lifecycle_manager.create(booking("10:30"))

    with pytest.raises(SchedulingConflictException):
        await lifecycle_manager.update(UpdateVisitRequest(visit_id=visit.id, duration_minutes=45))


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_update_completed_visit_fails(lifecycle_manager):
    visit = await lifecycle_manager.create(booking("10:00"))
    await lifecycle_manager.check_in(visit.id)
    await lifecycle_manager.start(visit.id)
    await lifecycle_manager.complete(visit.id)

    with pytest.raises(InvalidOperationException):
        await lifecycle_manager.update(UpdateVisitRequest(visit_id=visit.id, chief_complaint="edit"))
