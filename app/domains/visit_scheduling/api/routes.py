"""
Visit Scheduling API Routes

FastAPI router for visit booking, lifecycle and clinical note endpoints.
Domain errors propagate to the registered exception handlers.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, status

from app.domains.visit_scheduling.api.dependencies import CurrentUserId, OptionalUserId, SchedulingServiceDep
from app.domains.visit_scheduling.api.schemas import (
    AvailabilityBody,
    AvailabilityResponse,
    AvailablePractitionersResponse,
    CancelVisitBody,
    CreateNoteBody,
    CreateVisitBody,
    NoteResponse,
    PractitionerEntry,
    TIME_PATTERN,
    RescheduleVisitBody,
    UpdateNoteBody,
    UpdateVisitBody,
    VisitHistoryResponse,
    VisitPageResponse,
    VisitResponse,
    VitalSignsBody,
)
from app.domains.visit_scheduling.application.dto import (
    AvailabilityQuery,
    CreateNoteRequest,
    CreateVisitRequest,
    RescheduleVisitRequest,
    UpdateNoteRequest,
    UpdateVisitRequest,
    VisitSearchCriteria,
)
from app.domains.visit_scheduling.domain.value_objects import VisitStatus, VisitType

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


# ==================== Visits ====================


@router.post("/visits", response_model=VisitResponse, status_code=status.HTTP_201_CREATED)
async def create_visit(body: CreateVisitBody, service: SchedulingServiceDep, user_id: OptionalUserId):
    """Book a visit in a free slot."""
    visit = await service.create_visit(
        CreateVisitRequest(
            patient_id=body.patient_id,
            clinic_id=body.clinic_id,
            practitioner_id=body.practitioner_id,
            visit_type=body.visit_type,
            scheduled_date=body.scheduled_date,
            scheduled_time=body.scheduled_time,
            duration_minutes=body.duration_minutes,
            chief_complaint=body.chief_complaint,
            parent_visit_id=body.parent_visit_id,
            vital_signs=body.vital_signs,
            created_by=user_id,
        )
    )
    return VisitResponse.from_entity(visit)


@router.get("/visits", response_model=VisitPageResponse)
async def list_visits(
    service: SchedulingServiceDep,
    clinic_id: str | None = None,
    patient_id: str | None = None,
    practitioner_id: str | None = None,
    visit_status: Annotated[VisitStatus | None, Query(alias="status")] = None,
    visit_type: VisitType | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = 1,
    limit: int = 10,
):
    """List visits, most recent slot first."""
    result = await service.list_visits(
        VisitSearchCriteria(
            clinic_id=clinic_id,
            patient_id=patient_id,
            practitioner_id=practitioner_id,
            status=visit_status,
            visit_type=visit_type,
            date_from=date_from,
            date_to=date_to,
        ),
        page=page,
        limit=limit,
    )
    return VisitPageResponse.from_page(result)


@router.get("/visits/{visit_id}", response_model=VisitResponse)
async def get_visit(visit_id: str, service: SchedulingServiceDep):
    visit = await service.get_visit(visit_id)
    return VisitResponse.from_entity(visit)


@router.patch("/visits/{visit_id}", response_model=VisitResponse)
async def update_visit(visit_id: str, body: UpdateVisitBody, service: SchedulingServiceDep):
    """Patch visit fields. Moving the slot re-checks availability."""
    visit = await service.update_visit(UpdateVisitRequest(visit_id=visit_id, **body.model_dump()))
    return VisitResponse.from_entity(visit)


@router.post("/visits/{visit_id}/check-in", response_model=VisitResponse)
async def check_in_visit(visit_id: str, service: SchedulingServiceDep, body: VitalSignsBody | None = None):
    visit = await service.check_in(visit_id, body.vital_signs if body else None)
    return VisitResponse.from_entity(visit)


@router.post("/visits/{visit_id}/start", response_model=VisitResponse)
async def start_visit(visit_id: str, service: SchedulingServiceDep, body: VitalSignsBody | None = None):
    visit = await service.start_visit(visit_id, body.vital_signs if body else None)
    return VisitResponse.from_entity(visit)


@router.post("/visits/{visit_id}/complete", response_model=VisitResponse)
async def complete_visit(visit_id: str, service: SchedulingServiceDep):
    visit = await service.complete_visit(visit_id)
    return VisitResponse.from_entity(visit)


@router.post("/visits/{visit_id}/cancel", response_model=VisitResponse)
async def cancel_visit(
    visit_id: str,
    service: SchedulingServiceDep,
    user_id: OptionalUserId,
    body: CancelVisitBody | None = None,
):
    visit = await service.cancel_visit(visit_id, body.reason if body else None, user_id)
    return VisitResponse.from_entity(visit)


@router.post("/visits/{visit_id}/reschedule", response_model=VisitResponse)
async def reschedule_visit(visit_id: str, body: RescheduleVisitBody, service: SchedulingServiceDep):
    visit = await service.reschedule_visit(
        RescheduleVisitRequest(
            visit_id=visit_id,
            scheduled_date=body.scheduled_date,
            scheduled_time=body.scheduled_time,
            duration_minutes=body.duration_minutes,
        )
    )
    return VisitResponse.from_entity(visit)


@router.get("/visits/{visit_id}/note", response_model=NoteResponse)
async def get_visit_note(visit_id: str, service: SchedulingServiceDep):
    note = await service.get_note_for_visit(visit_id)
    return NoteResponse.from_entity(note)


# ==================== Availability ====================


@router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(body: AvailabilityBody, service: SchedulingServiceDep):
    """Check whether a practitioner is free for a slot. Read-only."""
    available = await service.is_available(
        AvailabilityQuery(
            practitioner_id=body.practitioner_id,
            clinic_id=body.clinic_id,
            scheduled_date=body.scheduled_date,
            scheduled_time=body.scheduled_time,
            duration_minutes=body.duration_minutes,
            exclude_visit_id=body.exclude_visit_id,
        )
    )
    return AvailabilityResponse(
        practitioner_id=body.practitioner_id,
        scheduled_date=body.scheduled_date,
        scheduled_time=body.scheduled_time,
        duration_minutes=body.duration_minutes,
        available=available,
    )


@router.get("/clinics/{clinic_id}/available-practitioners", response_model=AvailablePractitionersResponse)
async def available_practitioners(
    clinic_id: str,
    service: SchedulingServiceDep,
    scheduled_date: date,
    scheduled_time: Annotated[str, Query(pattern=TIME_PATTERN)],
    duration_minutes: Annotated[int | None, Query(gt=0)] = None,
):
    available = await service.find_available_practitioners(
        clinic_id, scheduled_date, scheduled_time, duration_minutes
    )
    return AvailablePractitionersResponse(
        clinic_id=clinic_id,
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
        duration_minutes=duration_minutes,
        practitioners=[PractitionerEntry.from_summary(summary) for summary in available],
    )


@router.get("/patients/{patient_id}/visit-history", response_model=VisitHistoryResponse)
async def patient_visit_history(patient_id: str, service: SchedulingServiceDep, clinic_id: str | None = None):
    history = await service.patient_visit_history(patient_id, clinic_id)
    return VisitHistoryResponse.from_history(history)


# ==================== Notes ====================


@router.post("/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(body: CreateNoteBody, service: SchedulingServiceDep, user_id: CurrentUserId):
    """Document a visit. The author must belong to the visit's clinic."""
    note = await service.create_note(CreateNoteRequest(created_by=user_id, **body.model_dump()))
    return NoteResponse.from_entity(note)


@router.get("/notes/{note_id}", response_model=NoteResponse)
async def get_note(note_id: str, service: SchedulingServiceDep):
    note = await service.get_note(note_id)
    return NoteResponse.from_entity(note)


@router.patch("/notes/{note_id}", response_model=NoteResponse)
async def update_note(note_id: str, body: UpdateNoteBody, service: SchedulingServiceDep):
    note = await service.update_note(UpdateNoteRequest(note_id=note_id, **body.model_dump()))
    return NoteResponse.from_entity(note)


@router.post("/notes/{note_id}/sign", response_model=NoteResponse)
async def sign_note(note_id: str, service: SchedulingServiceDep, user_id: CurrentUserId):
    """Sign a note. Signed notes are immutable."""
    note = await service.sign_note(note_id, user_id)
    return NoteResponse.from_entity(note)


__all__ = ["router"]
