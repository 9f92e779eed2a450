"""
Visit Scheduling Value Objects

Immutable value objects for the visit scheduling domain.
"""

from app.domains.visit_scheduling.domain.value_objects.note_content import (
    NoteType,
    validate_note_data,
)
from app.domains.visit_scheduling.domain.value_objects.time_slot import (
    DEFAULT_DURATION_MINUTES,
    TimeSlot,
    format_time,
    parse_time,
    validate_duration,
)
from app.domains.visit_scheduling.domain.value_objects.visit_status import (
    NON_BLOCKING_STATUSES,
    VisitStatus,
    VisitType,
)
from app.domains.visit_scheduling.domain.value_objects.vital_signs import (
    VitalSignValue,
    merge_vital_signs,
)

__all__ = [
    "VisitStatus",
    "VisitType",
    "NON_BLOCKING_STATUSES",
    "NoteType",
    "validate_note_data",
    "TimeSlot",
    "DEFAULT_DURATION_MINUTES",
    "parse_time",
    "format_time",
    "validate_duration",
    "VitalSignValue",
    "merge_vital_signs",
]
