"""
Visit Scheduling Domain Layer

Core business logic for booking visits and driving them through their
lifecycle.

Components:
- Entities: Visit, ClinicalNote (Aggregate Roots with business logic)
- Value Objects: VisitStatus, VisitType, NoteType, TimeSlot
- Domain Services: overlap detection over half-open slots
"""

from app.domains.visit_scheduling.domain.entities import ClinicalNote, Visit
from app.domains.visit_scheduling.domain.services import find_overlapping_visits, has_overlap
from app.domains.visit_scheduling.domain.value_objects import (
    NoteType,
    TimeSlot,
    VisitStatus,
    VisitType,
)

__all__ = [
    "Visit",
    "ClinicalNote",
    "VisitStatus",
    "VisitType",
    "NoteType",
    "TimeSlot",
    "find_overlapping_visits",
    "has_overlap",
]
