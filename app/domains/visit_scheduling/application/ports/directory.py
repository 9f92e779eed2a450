"""
Directory Ports

Read-only access to records owned by other parts of the platform:
patients and clinic staff assignments.
"""

from typing import Protocol, runtime_checkable

from app.domains.visit_scheduling.application.dto import PractitionerSummary


@runtime_checkable
class IPatientRepository(Protocol):
    """Patient lookup used to validate bookings."""

    async def exists(self, patient_id: str) -> bool:
        """
        Check whether a patient exists.

        Args:
            patient_id: Patient ID

        Returns:
            True if the patient is registered
        """
        ...


@runtime_checkable
class IClinicMembershipRepository(Protocol):
    """Clinic staff assignments, used for authorization and rosters."""

    async def has_active_membership(self, user_id: str, clinic_id: str) -> bool:
        """
        Check whether a user holds an active assignment to a clinic.

        Args:
            user_id: Staff user ID
            clinic_id: Clinic ID

        Returns:
            True if an active assignment exists
        """
        ...

    async def list_practitioners(self, clinic_id: str) -> list[PractitionerSummary]:
        """
        List active physiotherapists assigned to a clinic.

        Args:
            clinic_id: Clinic ID

        Returns:
            Roster entries ordered by user ID, one per practitioner
        """
        ...
