"""
Visit Scheduling Domain Container.

Single Responsibility: Wire all visit scheduling dependencies.
"""

import logging
from typing import TYPE_CHECKING

from app.domains.visit_scheduling.application.services import (
    AvailabilityChecker,
    ClinicalNoteGuard,
    SchedulingService,
    VisitLifecycleManager,
)
from app.domains.visit_scheduling.infrastructure.repositories import (
    SQLAlchemyClinicMembershipRepository,
    SQLAlchemyNoteRepository,
    SQLAlchemyPatientRepository,
    SQLAlchemyVisitRepository,
)

if TYPE_CHECKING:
    from app.core.container.base import BaseContainer

logger = logging.getLogger(__name__)


class SchedulingContainer:
    """
    Visit scheduling domain container.

    Single Responsibility: Create scheduling repositories and services.
    """

    def __init__(self, base: "BaseContainer"):
        """
        Initialize scheduling container.

        Args:
            base: BaseContainer with shared singletons
        """
        self._base = base

    # ==================== REPOSITORIES ====================

    def create_visit_repository(self, db) -> SQLAlchemyVisitRepository:
        """Create Visit Repository."""
        return SQLAlchemyVisitRepository(session=db)

    def create_note_repository(self, db) -> SQLAlchemyNoteRepository:
        """Create Note Repository."""
        return SQLAlchemyNoteRepository(session=db)

    def create_patient_repository(self, db) -> SQLAlchemyPatientRepository:
        """Create Patient Repository."""
        return SQLAlchemyPatientRepository(session=db)

    def create_membership_repository(self, db) -> SQLAlchemyClinicMembershipRepository:
        """Create Clinic Membership Repository."""
        return SQLAlchemyClinicMembershipRepository(session=db)

    # ==================== SERVICES ====================

    def create_scheduling_service(self, db) -> SchedulingService:
        """Create SchedulingService with all collaborators bound to one session."""
        settings = self._base.settings

        visit_repository = self.create_visit_repository(db)
        note_repository = self.create_note_repository(db)
        patient_repository = self.create_patient_repository(db)
        membership_repository = self.create_membership_repository(db)

        availability = AvailabilityChecker(
            visit_repository,
            default_duration_minutes=settings.DEFAULT_VISIT_DURATION_MINUTES,
        )
        lifecycle = VisitLifecycleManager(
            visit_repository=visit_repository,
            patient_repository=patient_repository,
            availability_checker=availability,
            slot_lock=self._base.get_slot_lock(),
            default_duration_minutes=settings.DEFAULT_VISIT_DURATION_MINUTES,
            max_duration_minutes=settings.MAX_VISIT_DURATION_MINUTES,
        )
        notes = ClinicalNoteGuard(
            note_repository=note_repository,
            visit_repository=visit_repository,
            membership_repository=membership_repository,
        )

        return SchedulingService(
            lifecycle=lifecycle,
            notes=notes,
            availability=availability,
            visit_repository=visit_repository,
            note_repository=note_repository,
            patient_repository=patient_repository,
            membership_repository=membership_repository,
        )
