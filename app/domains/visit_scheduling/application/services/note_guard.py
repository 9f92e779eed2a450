"""
Clinical Note Guard

Enforces one note per visit and sign-once for clinical notes.
"""

import logging

from app.core.domain import DuplicateEntityException, EntityNotFoundException
from app.domains.visit_scheduling.application.dto import CreateNoteRequest, UpdateNoteRequest
from app.domains.visit_scheduling.application.ports import (
    IClinicMembershipRepository,
    INoteRepository,
    IVisitRepository,
)
from app.domains.visit_scheduling.domain.entities import ClinicalNote

logger = logging.getLogger(__name__)


class ClinicalNoteGuard:
    """
    Guard around note creation, editing and signing.

    Creation is only allowed for staff assigned to the visit's clinic.
    Outsiders get the same "Visit not found" answer as for a missing visit.
    """

    def __init__(
        self,
        note_repository: INoteRepository,
        visit_repository: IVisitRepository,
        membership_repository: IClinicMembershipRepository,
    ):
        self.note_repo = note_repository
        self.visit_repo = visit_repository
        self.membership_repo = membership_repository

    async def get(self, note_id: str) -> ClinicalNote:
        """
        Load a note.

        Raises:
            EntityNotFoundException: If the note does not exist
        """
        note = await self.note_repo.find_by_id(note_id)
        if note is None:
            raise EntityNotFoundException(entity_type="Note", entity_id=note_id, message="Note not found")
        return note

    async def get_for_visit(self, visit_id: str) -> ClinicalNote:
        """Load the note attached to a visit."""
        note = await self.note_repo.find_by_visit_id(visit_id)
        if note is None:
            raise EntityNotFoundException(
                entity_type="Note",
                entity_id=visit_id,
                message="Visit has no note",
            )
        return note

    async def create(self, request: CreateNoteRequest) -> ClinicalNote:
        """
        Attach a new note to a visit.

        Raises:
            EntityNotFoundException: If the visit does not exist or the
                creator is not assigned to its clinic
            DuplicateEntityException: If the visit already has a note
            ValidationException: If note_data does not fit the note type
        """
        # 1. Verify visit exists and creator belongs to its clinic
        visit = await self.visit_repo.find_by_id(request.visit_id)
        if visit is None or not await self.membership_repo.has_active_membership(
            request.created_by, visit.clinic_id
        ):
            raise EntityNotFoundException(entity_type="Visit", entity_id=request.visit_id, message="Visit not found")

        # 2. One note per visit
        if await self.note_repo.find_by_visit_id(request.visit_id) is not None:
            raise DuplicateEntityException(
                entity_type="Note",
                field="visit_id",
                value=request.visit_id,
                message="Visit already has a note",
            )

        # 3. Create and persist
        note = ClinicalNote.create(
            visit_id=request.visit_id,
            note_type=request.note_type,
            note_data=request.note_data,
            created_by=request.created_by,
            additional_notes=request.additional_notes,
            treatment_codes=request.treatment_codes,
            treatment_details=request.treatment_details,
            goals=request.goals,
            outcome_measures=request.outcome_measures,
            attachments=request.attachments,
        )
        saved = await self.note_repo.add(note)

        logger.info(f"Note {saved.id} ({saved.note_type.value}) created for visit {saved.visit_id}")
        return saved

    async def update(self, request: UpdateNoteRequest) -> ClinicalNote:
        """
        Patch an unsigned note.

        Raises:
            InvalidOperationException: If the note is signed
        """
        note = await self.get(request.note_id)
        note.update(**request.changes())
        saved = await self.note_repo.update(note)
        logger.info(f"Note {saved.id} updated")
        return saved

    async def sign(self, note_id: str, signed_by: str) -> ClinicalNote:
        """
        Sign a note, making it immutable.

        Raises:
            InvalidOperationException: If the note is already signed
        """
        note = await self.get(note_id)
        note.sign(signed_by)
        saved = await self.note_repo.update(note)
        logger.info(f"Note {saved.id} signed by {signed_by}")
        return saved
