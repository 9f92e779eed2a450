"""
Visit Scheduling Ports

Interfaces (ports) for the visit scheduling domain following Clean Architecture.
"""

from app.domains.visit_scheduling.application.ports.directory import (
    IClinicMembershipRepository,
    IPatientRepository,
)
from app.domains.visit_scheduling.application.ports.note_repository import INoteRepository
from app.domains.visit_scheduling.application.ports.slot_lock import ISlotLock
from app.domains.visit_scheduling.application.ports.visit_repository import IVisitRepository

__all__ = [
    "IVisitRepository",
    "INoteRepository",
    "IPatientRepository",
    "IClinicMembershipRepository",
    "ISlotLock",
]
