"""
Shared pytest fixtures for all tests.

This module wires the scheduling services over in-memory repositories
and provides the shared test data used across the suite.
"""

import os

import pytest

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["TESTING"] = "true"
os.environ.setdefault("SCHEDULING_LOCK_BACKEND", "memory")

from app.domains.visit_scheduling.application.services import (  # noqa: E402
    AvailabilityChecker,
    ClinicalNoteGuard,
    SchedulingService,
    VisitLifecycleManager,
)
from app.domains.visit_scheduling.infrastructure.locking import InProcessSlotLock  # noqa: E402
from tests.utils import (  # noqa: E402
    CLINIC_ID,
    PATIENT_ID,
    PRACTITIONER_ID,
    InMemoryClinicMembershipRepository,
    InMemoryNoteRepository,
    InMemoryPatientRepository,
    InMemoryVisitRepository,
)

# ============================================================================
# REPOSITORY FIXTURES
# ============================================================================


@pytest.fixture
def visit_repository() -> InMemoryVisitRepository:
    return InMemoryVisitRepository()


@pytest.fixture
def note_repository() -> InMemoryNoteRepository:
    return InMemoryNoteRepository()


@pytest.fixture
def patient_repository() -> InMemoryPatientRepository:
    return InMemoryPatientRepository({PATIENT_ID})


@pytest.fixture
def membership_repository() -> InMemoryClinicMembershipRepository:
    """PRACTITIONER_ID (clinic admin) and a second physio work at CLINIC_ID; a receptionist too."""
    return InMemoryClinicMembershipRepository(
        [
            (PRACTITIONER_ID, CLINIC_ID, "PHYSIOTHERAPIST"),
            ("physio-2", CLINIC_ID, "PHYSIOTHERAPIST"),
            ("reception-1", CLINIC_ID, "RECEPTIONIST"),
        ],
        admins={PRACTITIONER_ID},
        names={PRACTITIONER_ID: "Dana Reyes", "physio-2": "Sam Ortiz"},
    )


@pytest.fixture
def slot_lock() -> InProcessSlotLock:
    return InProcessSlotLock(timeout_seconds=1.0)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def availability_checker(visit_repository) -> AvailabilityChecker:
    return AvailabilityChecker(visit_repository)


@pytest.fixture
def lifecycle_manager(visit_repository, patient_repository, availability_checker, slot_lock) -> VisitLifecycleManager:
    return VisitLifecycleManager(
        visit_repository=visit_repository,
        patient_repository=patient_repository,
        availability_checker=availability_checker,
        slot_lock=slot_lock,
        max_duration_minutes=480,
    )


@pytest.fixture
def note_guard(note_repository, visit_repository, membership_repository) -> ClinicalNoteGuard:
    return ClinicalNoteGuard(
        note_repository=note_repository,
        visit_repository=visit_repository,
        membership_repository=membership_repository,
    )


@pytest.fixture
def scheduling_service(
    lifecycle_manager,
    note_guard,
    availability_checker,
    visit_repository,
    note_repository,
    patient_repository,
    membership_repository,
) -> SchedulingService:
    return SchedulingService(
        lifecycle=lifecycle_manager,
        notes=note_guard,
        availability=availability_checker,
        visit_repository=visit_repository,
        note_repository=note_repository,
        patient_repository=patient_repository,
        membership_repository=membership_repository,
    )
