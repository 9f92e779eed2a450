"""
Unit tests for AvailabilityChecker.
"""

from datetime import date

import pytest

from app.core.domain import SchedulingConflictException, ValidationException
from app.domains.visit_scheduling.application.services import AvailabilityChecker
from app.domains.visit_scheduling.domain.value_objects import VisitStatus
from tests.utils import CLINIC_ID, PRACTITIONER_ID, VISIT_DATE, InMemoryVisitRepository, VisitBuilder


@pytest.fixture
def booked_day() -> InMemoryVisitRepository:
    """Physio-1 has 10:00-10:30 booked and a cancelled 11:00 visit."""
    return InMemoryVisitRepository(
        [
            VisitBuilder().with_id("v-1000").at("10:00", 30).build(),
            VisitBuilder().with_id("v-1100").at("11:00", 30).with_status(VisitStatus.CANCELLED).build(),
        ]
    )


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start,minutes,expected",
    [
        ("10:00", 30, False),
        ("10:15", 30, False),
        ("09:45", 30, False),
        ("09:30", 30, True),  # ends when the booked visit starts
        ("10:30", 30, True),  # starts when the booked visit ends
        ("11:00", 30, True),  # cancelled visit frees its slot
    ],
)
async def test_is_available(booked_day, start, minutes, expected):
    checker = AvailabilityChecker(booked_day)

    available = await checker.is_available(PRACTITIONER_ID, CLINIC_ID, VISIT_DATE, start, minutes)

    assert available is expected


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_other_practitioner_clinic_or_day_is_unaffected(booked_day):
    checker = AvailabilityChecker(booked_day)

    assert await checker.is_available("physio-2", CLINIC_ID, VISIT_DATE, "10:00", 30)
    assert await checker.is_available(PRACTITIONER_ID, "clinic-2", VISIT_DATE, "10:00", 30)
    assert await checker.is_available(PRACTITIONER_ID, CLINIC_ID, date(2024, 3, 2), "10:00", 30)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_excluded_visit_does_not_block_itself(booked_day):
    checker = AvailabilityChecker(booked_day)

    assert await checker.is_available(PRACTITIONER_ID, CLINIC_ID, VISIT_DATE, "10:15", 30, exclude_visit_id="v-1000")


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_default_duration_applies_when_omitted(booked_day):
    checker = AvailabilityChecker(booked_day, default_duration_minutes=45)

    assert await checker.is_available(PRACTITIONER_ID, CLINIC_ID, VISIT_DATE, "09:30") is False


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_non_positive_duration_is_validation_error(booked_day):
    checker = AvailabilityChecker(booked_day)

    with pytest.raises(ValidationException):
        await checker.is_available(PRACTITIONER_ID, CLINIC_ID, VISIT_DATE, "12:00", 0)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_repeated_checks_give_same_answer_without_writes(booked_day):
    checker = AvailabilityChecker(booked_day)

    answers = [await checker.is_available(PRACTITIONER_ID, CLINIC_ID, VISIT_DATE, "10:15", 30) for _ in range(3)]

    assert answers == [False, False, False]
    assert booked_day.add_calls == 0
    assert booked_day.update_calls == 0


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_ensure_available_reports_conflicting_visits(booked_day):
    checker = AvailabilityChecker(booked_day)

    with pytest.raises(SchedulingConflictException) as exc_info:
        await checker.ensure_available(PRACTITIONER_ID, CLINIC_ID, VISIT_DATE, "10:15", 30)

    error = exc_info.value
    assert error.code == "SCHEDULING_CONFLICT"
    assert error.conflicting_visit_ids == ["v-1000"]
    assert error.details["time_slot"] == "2024-03-01 10:15-10:45"
