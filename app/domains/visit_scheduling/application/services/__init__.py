"""
Visit Scheduling Application Services
"""

from app.domains.visit_scheduling.application.services.availability_checker import AvailabilityChecker
from app.domains.visit_scheduling.application.services.note_guard import ClinicalNoteGuard
from app.domains.visit_scheduling.application.services.scheduling_service import SchedulingService
from app.domains.visit_scheduling.application.services.visit_lifecycle import VisitLifecycleManager

__all__ = [
    "AvailabilityChecker",
    "VisitLifecycleManager",
    "ClinicalNoteGuard",
    "SchedulingService",
]
