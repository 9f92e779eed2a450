"""
Visit Scheduling Application DTOs

Request and result objects passed between the API layer and the
application services.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from app.domains.visit_scheduling.domain.entities import Visit
from app.domains.visit_scheduling.domain.value_objects import NoteType, VisitStatus, VisitType

# ==================== Visit DTOs ====================


@dataclass(frozen=True)
class CreateVisitRequest:
    """Request to book a visit."""

    patient_id: str
    clinic_id: str
    practitioner_id: str
    visit_type: VisitType
    scheduled_date: date
    scheduled_time: str
    duration_minutes: int | None = None
    chief_complaint: str | None = None
    parent_visit_id: str | None = None
    vital_signs: dict[str, Any] | None = None
    created_by: str | None = None


@dataclass(frozen=True)
class RescheduleVisitRequest:
    """Request to move a visit to a new slot."""

    visit_id: str
    scheduled_date: date
    scheduled_time: str
    duration_minutes: int | None = None


@dataclass(frozen=True)
class UpdateVisitRequest:
    """Partial update of a visit. None means "leave unchanged"."""

    visit_id: str
    practitioner_id: str | None = None
    visit_type: VisitType | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    duration_minutes: int | None = None
    chief_complaint: str | None = None
    parent_visit_id: str | None = None
    vital_signs: dict[str, Any] | None = None

    @property
    def moves_slot(self) -> bool:
        return any(
            value is not None
            for value in (self.scheduled_date, self.scheduled_time, self.duration_minutes, self.practitioner_id)
        )


@dataclass(frozen=True)
class AvailabilityQuery:
    """Candidate slot for an availability check."""

    practitioner_id: str
    clinic_id: str
    scheduled_date: date
    scheduled_time: str
    duration_minutes: int | None = None
    exclude_visit_id: str | None = None


@dataclass(frozen=True)
class VisitSearchCriteria:
    """Filters for listing visits."""

    clinic_id: str | None = None
    patient_id: str | None = None
    practitioner_id: str | None = None
    status: VisitStatus | None = None
    visit_type: VisitType | None = None
    date_from: date | None = None
    date_to: date | None = None


@dataclass
class VisitPage:
    """One page of visits."""

    items: list[Visit]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


@dataclass(frozen=True)
class PractitionerSummary:
    """Roster entry for a physiotherapist assigned to a clinic."""

    user_id: str
    name: str | None = None
    is_admin: bool = False


@dataclass
class MonthlyVisitStats:
    """Visit counts for one ``YYYY-MM`` month."""

    month: str
    count: int = 0
    completed: int = 0
    cancelled: int = 0


@dataclass
class PatientVisitHistory:
    """Visit statistics for one patient."""

    patient_id: str
    total_visits: int
    completed_visits: int
    cancelled_visits: int
    upcoming_visits: int
    notes_count: int
    attendance_rate: float
    visits_by_month: list[MonthlyVisitStats] = field(default_factory=list)
    recent_visits: list[Visit] = field(default_factory=list)


# ==================== Note DTOs ====================


@dataclass(frozen=True)
class CreateNoteRequest:
    """Request to document a visit."""

    visit_id: str
    note_type: NoteType
    note_data: dict[str, Any]
    created_by: str
    additional_notes: str | None = None
    treatment_codes: list[str] | None = None
    treatment_details: dict[str, Any] | None = None
    goals: dict[str, Any] | None = None
    outcome_measures: dict[str, Any] | None = None
    attachments: list[str] | None = None


@dataclass(frozen=True)
class UpdateNoteRequest:
    """Partial update of an unsigned note."""

    note_id: str
    note_type: NoteType | None = None
    note_data: dict[str, Any] | None = None
    additional_notes: str | None = None
    treatment_codes: list[str] | None = None
    treatment_details: dict[str, Any] | None = None
    goals: dict[str, Any] | None = None
    outcome_measures: dict[str, Any] | None = None
    attachments: list[str] | None = None

    def changes(self) -> dict[str, Any]:
        return {
            "note_type": self.note_type,
            "note_data": self.note_data,
            "additional_notes": self.additional_notes,
            "treatment_codes": self.treatment_codes,
            "treatment_details": self.treatment_details,
            "goals": self.goals,
            "outcome_measures": self.outcome_measures,
            "attachments": self.attachments,
        }


__all__ = [
    "CreateVisitRequest",
    "RescheduleVisitRequest",
    "UpdateVisitRequest",
    "AvailabilityQuery",
    "VisitSearchCriteria",
    "VisitPage",
    "PractitionerSummary",
    "MonthlyVisitStats",
    "PatientVisitHistory",
    "CreateNoteRequest",
    "UpdateNoteRequest",
]
