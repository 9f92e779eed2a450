"""
Visit Repository Port

Interface for visit data access following Clean Architecture.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from app.domains.visit_scheduling.application.dto import VisitSearchCriteria
from app.domains.visit_scheduling.domain.entities import Visit


@runtime_checkable
class IVisitRepository(Protocol):
    """
    Visit repository interface.

    Defines the contract for visit data access operations.
    """

    async def find_by_id(self, visit_id: str) -> Visit | None:
        """
        Find visit by ID.

        Args:
            visit_id: Unique visit identifier

        Returns:
            Visit if found, None otherwise
        """
        ...

    async def find_slot_holders(
        self,
        practitioner_id: str,
        clinic_id: str,
        scheduled_date: date,
        exclude_visit_id: str | None = None,
    ) -> list[Visit]:
        """
        Find the visits that occupy a practitioner's day at a clinic.

        Visits in CANCELLED or NO_SHOW status are not returned.

        Args:
            practitioner_id: Practitioner ID
            clinic_id: Clinic ID
            scheduled_date: Calendar day to scan
            exclude_visit_id: Visit to leave out (the one being moved)

        Returns:
            Visits holding a slot that day
        """
        ...

    async def find_by_patient(self, patient_id: str, clinic_id: str | None = None) -> list[Visit]:
        """
        Find all visits of a patient, most recent first.

        Args:
            patient_id: Patient ID
            clinic_id: Optional clinic filter

        Returns:
            Patient's visits ordered by date and time descending
        """
        ...

    async def search(
        self,
        criteria: VisitSearchCriteria,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Visit], int]:
        """
        Search visits with filters and pagination.

        Args:
            criteria: Filters to apply
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of (visits ordered by date and time descending, total matches)
        """
        ...

    async def add(self, visit: Visit) -> Visit:
        """
        Persist a new visit.

        Args:
            visit: Visit to insert

        Returns:
            Stored visit
        """
        ...

    async def update(self, visit: Visit) -> Visit:
        """
        Write back a modified visit.

        The write only applies if the stored version still equals
        ``visit.version``; the version is then incremented.

        Args:
            visit: Visit with changes

        Returns:
            Stored visit with its new version

        Raises:
            ConcurrencyException: If the visit was modified concurrently
        """
        ...
