"""
Visit Scheduling Repository Implementations

SQLAlchemy-based repositories for the visit scheduling domain.
"""

from app.domains.visit_scheduling.infrastructure.repositories.directory_repository import (
    SQLAlchemyClinicMembershipRepository,
    SQLAlchemyPatientRepository,
)
from app.domains.visit_scheduling.infrastructure.repositories.note_repository import SQLAlchemyNoteRepository
from app.domains.visit_scheduling.infrastructure.repositories.visit_repository import SQLAlchemyVisitRepository

__all__ = [
    "SQLAlchemyVisitRepository",
    "SQLAlchemyNoteRepository",
    "SQLAlchemyPatientRepository",
    "SQLAlchemyClinicMembershipRepository",
]
