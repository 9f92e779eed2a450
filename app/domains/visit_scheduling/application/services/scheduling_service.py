"""
Scheduling Service

Facade exposing visit booking, lifecycle, availability and note operations
to the API layer.
"""

import logging
from collections import Counter
from datetime import date

from app.core.domain import EntityNotFoundException, ValidationException
from app.domains.visit_scheduling.application.dto import (
    AvailabilityQuery,
    CreateNoteRequest,
    CreateVisitRequest,
    MonthlyVisitStats,
    PatientVisitHistory,
    PractitionerSummary,
    RescheduleVisitRequest,
    UpdateNoteRequest,
    UpdateVisitRequest,
    VisitPage,
    VisitSearchCriteria,
)
from app.domains.visit_scheduling.application.ports import (
    IClinicMembershipRepository,
    INoteRepository,
    IPatientRepository,
    IVisitRepository,
)
from app.domains.visit_scheduling.application.services.availability_checker import AvailabilityChecker
from app.domains.visit_scheduling.application.services.note_guard import ClinicalNoteGuard
from app.domains.visit_scheduling.application.services.visit_lifecycle import VisitLifecycleManager
from app.domains.visit_scheduling.domain.entities import ClinicalNote, Visit
from app.domains.visit_scheduling.domain.value_objects import VisitStatus

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
RECENT_VISITS_LIMIT = 10


class SchedulingService:
    """
    Entry point for every scheduling operation.

    State-changing operations return the full updated Visit or ClinicalNote.
    """

    def __init__(
        self,
        lifecycle: VisitLifecycleManager,
        notes: ClinicalNoteGuard,
        availability: AvailabilityChecker,
        visit_repository: IVisitRepository,
        note_repository: INoteRepository,
        patient_repository: IPatientRepository,
        membership_repository: IClinicMembershipRepository,
    ):
        self.lifecycle = lifecycle
        self.notes = notes
        self.availability = availability
        self.visit_repo = visit_repository
        self.note_repo = note_repository
        self.patient_repo = patient_repository
        self.membership_repo = membership_repository

    # ==================== Visits ====================

    async def create_visit(self, request: CreateVisitRequest) -> Visit:
        return await self.lifecycle.create(request)

    async def get_visit(self, visit_id: str) -> Visit:
        return await self.lifecycle.get(visit_id)

    async def update_visit(self, request: UpdateVisitRequest) -> Visit:
        return await self.lifecycle.update(request)

    async def check_in(self, visit_id: str, vital_signs: dict | None = None) -> Visit:
        return await self.lifecycle.check_in(visit_id, vital_signs)

    async def start_visit(self, visit_id: str, vital_signs: dict | None = None) -> Visit:
        return await self.lifecycle.start(visit_id, vital_signs)

    async def complete_visit(self, visit_id: str) -> Visit:
        return await self.lifecycle.complete(visit_id)

    async def cancel_visit(self, visit_id: str, reason: str | None, cancelled_by: str | None) -> Visit:
        return await self.lifecycle.cancel(visit_id, reason, cancelled_by)

    async def reschedule_visit(self, request: RescheduleVisitRequest) -> Visit:
        return await self.lifecycle.reschedule(request)

    async def list_visits(self, criteria: VisitSearchCriteria, page: int = 1, limit: int = 10) -> VisitPage:
        """
        List visits matching the filters, newest slot first.

        Args:
            criteria: Filters
            page: 1-based page number
            limit: Page size (1..100)

        Returns:
            Page of visits with the total match count
        """
        if page < 1:
            raise ValidationException("Page must be at least 1", field="page")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationException(f"Limit must be between 1 and {MAX_PAGE_SIZE}", field="limit")
        if criteria.date_from and criteria.date_to and criteria.date_from > criteria.date_to:
            raise ValidationException("date_from must not be after date_to", field="date_from")

        items, total = await self.visit_repo.search(criteria, offset=(page - 1) * limit, limit=limit)
        return VisitPage(items=items, total=total, page=page, limit=limit)

    # ==================== Availability ====================

    async def is_available(self, query: AvailabilityQuery) -> bool:
        return await self.availability.is_available(
            practitioner_id=query.practitioner_id,
            clinic_id=query.clinic_id,
            scheduled_date=query.scheduled_date,
            scheduled_time=query.scheduled_time,
            duration_minutes=query.duration_minutes,
            exclude_visit_id=query.exclude_visit_id,
        )

    async def find_available_practitioners(
        self,
        clinic_id: str,
        scheduled_date: date,
        scheduled_time: str,
        duration_minutes: int | None = None,
    ) -> list[PractitionerSummary]:
        """Return roster entries for the clinic's practitioners who are free for the slot."""
        roster = await self.membership_repo.list_practitioners(clinic_id)

        available: list[PractitionerSummary] = []
        for practitioner in roster:
            if await self.availability.is_available(
                practitioner_id=practitioner.user_id,
                clinic_id=clinic_id,
                scheduled_date=scheduled_date,
                scheduled_time=scheduled_time,
                duration_minutes=duration_minutes,
            ):
                available.append(practitioner)

        logger.debug(
            f"{len(available)}/{len(roster)} practitioners free at clinic {clinic_id} "
            f"on {scheduled_date} {scheduled_time}"
        )
        return available

    # ==================== History ====================

    async def patient_visit_history(self, patient_id: str, clinic_id: str | None = None) -> PatientVisitHistory:
        """
        Summarize a patient's visits.

        attendance_rate is completed / (total - upcoming) as a percentage,
        rounded to one decimal; 0 when nothing has happened yet.
        """
        if not await self.patient_repo.exists(patient_id):
            raise EntityNotFoundException(entity_type="Patient", entity_id=patient_id, message="Patient not found")

        visits = await self.visit_repo.find_by_patient(patient_id, clinic_id)
        statuses = Counter(visit.status for visit in visits)

        total = len(visits)
        completed = statuses[VisitStatus.COMPLETED]
        upcoming = statuses[VisitStatus.SCHEDULED]
        past = total - upcoming
        attendance_rate = round(completed / past * 100, 1) if past > 0 else 0.0

        by_month: dict[str, MonthlyVisitStats] = {}
        for visit in visits:
            if visit.scheduled_date is None:
                continue
            month = visit.scheduled_date.strftime("%Y-%m")
            stats = by_month.setdefault(month, MonthlyVisitStats(month=month))
            stats.count += 1
            if visit.status == VisitStatus.COMPLETED:
                stats.completed += 1
            elif visit.status == VisitStatus.CANCELLED:
                stats.cancelled += 1

        notes_count = await self.note_repo.count_for_visits([visit.id for visit in visits if visit.id])

        return PatientVisitHistory(
            patient_id=patient_id,
            total_visits=total,
            completed_visits=completed,
            cancelled_visits=statuses[VisitStatus.CANCELLED],
            upcoming_visits=upcoming,
            notes_count=notes_count,
            attendance_rate=attendance_rate,
            visits_by_month=sorted(by_month.values(), key=lambda stats: stats.month, reverse=True),
            recent_visits=visits[:RECENT_VISITS_LIMIT],
        )

    # ==================== Notes ====================

    async def create_note(self, request: CreateNoteRequest) -> ClinicalNote:
        return await self.notes.create(request)

    async def get_note(self, note_id: str) -> ClinicalNote:
        return await self.notes.get(note_id)

    async def get_note_for_visit(self, visit_id: str) -> ClinicalNote:
        await self.lifecycle.get(visit_id)
        return await self.notes.get_for_visit(visit_id)

    async def update_note(self, request: UpdateNoteRequest) -> ClinicalNote:
        return await self.notes.update(request)

    async def sign_note(self, note_id: str, signed_by: str) -> ClinicalNote:
        return await self.notes.sign(note_id, signed_by)
