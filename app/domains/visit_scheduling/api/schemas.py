"""
Visit Scheduling API Schemas

Pydantic schemas for API request/response validation.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domains.visit_scheduling.application.dto import PatientVisitHistory, PractitionerSummary, VisitPage
from app.domains.visit_scheduling.domain.entities import ClinicalNote, Visit
from app.domains.visit_scheduling.domain.value_objects import NoteType, VisitStatus, VisitType, format_time

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ==================== Visit Requests ====================


class CreateVisitBody(BaseModel):
    """Visit booking request schema."""

    patient_id: str = Field(..., min_length=1)
    clinic_id: str = Field(..., min_length=1)
    practitioner_id: str = Field(..., min_length=1)
    visit_type: VisitType
    scheduled_date: date
    scheduled_time: str = Field(..., pattern=TIME_PATTERN, examples=["10:30"])
    duration_minutes: int | None = Field(default=None, gt=0)
    chief_complaint: str | None = None
    parent_visit_id: str | None = None
    vital_signs: dict[str, Any] | None = None


class UpdateVisitBody(BaseModel):
    """Partial visit update. Omitted fields are left unchanged."""

    practitioner_id: str | None = Field(default=None, min_length=1)
    visit_type: VisitType | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    duration_minutes: int | None = Field(default=None, gt=0)
    chief_complaint: str | None = None
    parent_visit_id: str | None = None
    vital_signs: dict[str, Any] | None = None


class VitalSignsBody(BaseModel):
    """Optional vitals captured at check-in or start."""

    vital_signs: dict[str, Any] | None = None


class CancelVisitBody(BaseModel):
    reason: str | None = None


class RescheduleVisitBody(BaseModel):
    scheduled_date: date
    scheduled_time: str = Field(..., pattern=TIME_PATTERN)
    duration_minutes: int | None = Field(default=None, gt=0)


class AvailabilityBody(BaseModel):
    """Availability check request schema."""

    practitioner_id: str = Field(..., min_length=1)
    clinic_id: str = Field(..., min_length=1)
    scheduled_date: date
    scheduled_time: str = Field(..., pattern=TIME_PATTERN)
    duration_minutes: int | None = Field(default=None, gt=0)
    exclude_visit_id: str | None = None


# ==================== Visit Responses ====================


class VisitResponse(BaseModel):
    """Visit response schema."""

    id: str
    patient_id: str
    clinic_id: str
    practitioner_id: str
    parent_visit_id: str | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    duration_minutes: int
    visit_type: VisitType
    chief_complaint: str | None = None
    vital_signs: dict[str, Any] = Field(default_factory=dict)
    status: VisitStatus
    check_in_time: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    @classmethod
    def from_entity(cls, visit: Visit) -> "VisitResponse":
        return cls(
            id=str(visit.id),
            patient_id=visit.patient_id,
            clinic_id=visit.clinic_id,
            practitioner_id=visit.practitioner_id,
            parent_visit_id=visit.parent_visit_id,
            scheduled_date=visit.scheduled_date,
            scheduled_time=format_time(visit.scheduled_time) if visit.scheduled_time else None,
            duration_minutes=visit.duration_minutes,
            visit_type=visit.visit_type,
            chief_complaint=visit.chief_complaint,
            vital_signs=dict(visit.vital_signs),
            status=visit.status,
            check_in_time=visit.check_in_time,
            start_time=visit.start_time,
            end_time=visit.end_time,
            cancellation_reason=visit.cancellation_reason,
            cancelled_by=visit.cancelled_by,
            cancelled_at=visit.cancelled_at,
            created_by=visit.created_by,
            created_at=visit.created_at,
            updated_at=visit.updated_at,
            version=visit.version,
        )


class VisitPageResponse(BaseModel):
    """Paginated visit list."""

    items: list[VisitResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: VisitPage) -> "VisitPageResponse":
        return cls(
            items=[VisitResponse.from_entity(visit) for visit in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )


class AvailabilityResponse(BaseModel):
    practitioner_id: str
    scheduled_date: date
    scheduled_time: str
    duration_minutes: int | None = None
    available: bool


class PractitionerEntry(BaseModel):
    """Roster entry of a free practitioner."""

    id: str
    name: str | None = None
    is_admin: bool = False

    @classmethod
    def from_summary(cls, summary: PractitionerSummary) -> "PractitionerEntry":
        return cls(id=summary.user_id, name=summary.name, is_admin=summary.is_admin)


class AvailablePractitionersResponse(BaseModel):
    clinic_id: str
    scheduled_date: date
    scheduled_time: str
    duration_minutes: int | None = None
    practitioners: list[PractitionerEntry]


class MonthlyVisitStatsResponse(BaseModel):
    month: str
    count: int
    completed: int
    cancelled: int


class VisitHistoryResponse(BaseModel):
    """Patient visit statistics."""

    patient_id: str
    total_visits: int
    completed_visits: int
    cancelled_visits: int
    upcoming_visits: int
    notes_count: int
    attendance_rate: float
    visits_by_month: list[MonthlyVisitStatsResponse]
    recent_visits: list[VisitResponse]

    @classmethod
    def from_history(cls, history: PatientVisitHistory) -> "VisitHistoryResponse":
        return cls(
            patient_id=history.patient_id,
            total_visits=history.total_visits,
            completed_visits=history.completed_visits,
            cancelled_visits=history.cancelled_visits,
            upcoming_visits=history.upcoming_visits,
            notes_count=history.notes_count,
            attendance_rate=history.attendance_rate,
            visits_by_month=[
                MonthlyVisitStatsResponse(
                    month=stats.month, count=stats.count, completed=stats.completed, cancelled=stats.cancelled
                )
                for stats in history.visits_by_month
            ],
            recent_visits=[VisitResponse.from_entity(visit) for visit in history.recent_visits],
        )


# ==================== Notes ====================


class CreateNoteBody(BaseModel):
    """Clinical note creation request schema."""

    visit_id: str = Field(..., min_length=1)
    note_type: NoteType
    note_data: dict[str, Any]
    additional_notes: str | None = None
    treatment_codes: list[str] | None = None
    treatment_details: dict[str, Any] | None = None
    goals: dict[str, Any] | None = None
    outcome_measures: dict[str, Any] | None = None
    attachments: list[str] | None = None


class UpdateNoteBody(BaseModel):
    """Partial note update. Omitted fields are left unchanged."""

    note_type: NoteType | None = None
    note_data: dict[str, Any] | None = None
    additional_notes: str | None = None
    treatment_codes: list[str] | None = None
    treatment_details: dict[str, Any] | None = None
    goals: dict[str, Any] | None = None
    outcome_measures: dict[str, Any] | None = None
    attachments: list[str] | None = None


class NoteResponse(BaseModel):
    """Clinical note response schema."""

    id: str
    visit_id: str
    note_type: NoteType
    note_data: dict[str, Any]
    additional_notes: str | None = None
    treatment_codes: list[str] = Field(default_factory=list)
    treatment_details: dict[str, Any] = Field(default_factory=dict)
    goals: dict[str, Any] = Field(default_factory=dict)
    outcome_measures: dict[str, Any] = Field(default_factory=dict)
    attachments: list[str] = Field(default_factory=list)
    is_signed: bool
    signed_by: str | None = None
    signed_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 0

    @classmethod
    def from_entity(cls, note: ClinicalNote) -> "NoteResponse":
        return cls(
            id=str(note.id),
            visit_id=note.visit_id,
            note_type=note.note_type,
            note_data=dict(note.note_data),
            additional_notes=note.additional_notes,
            treatment_codes=list(note.treatment_codes),
            treatment_details=dict(note.treatment_details),
            goals=dict(note.goals),
            outcome_measures=dict(note.outcome_measures),
            attachments=list(note.attachments),
            is_signed=note.is_signed,
            signed_by=note.signed_by,
            signed_at=note.signed_at,
            created_by=note.created_by,
            created_at=note.created_at,
            updated_at=note.updated_at,
            version=note.version,
        )


__all__ = [
    "CreateVisitBody",
    "UpdateVisitBody",
    "VitalSignsBody",
    "CancelVisitBody",
    "RescheduleVisitBody",
    "AvailabilityBody",
    "VisitResponse",
    "VisitPageResponse",
    "AvailabilityResponse",
    "AvailablePractitionersResponse",
    "VisitHistoryResponse",
    "CreateNoteBody",
    "UpdateNoteBody",
    "NoteResponse",
]
