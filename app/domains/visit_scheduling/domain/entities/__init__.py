"""
Visit Scheduling Domain Entities
"""

from app.domains.visit_scheduling.domain.entities.clinical_note import ClinicalNote
from app.domains.visit_scheduling.domain.entities.visit import Visit

__all__ = [
    "Visit",
    "ClinicalNote",
]
