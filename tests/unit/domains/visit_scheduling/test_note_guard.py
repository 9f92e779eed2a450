"""
Unit tests for ClinicalNoteGuard.
"""

import pytest
import pytest_asyncio

from app.core.domain import (
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from app.domains.visit_scheduling.application.dto import CreateNoteRequest, UpdateNoteRequest
from app.domains.visit_scheduling.domain.value_objects import NoteType
from tests.utils import PRACTITIONER_ID, SOAP_DATA, NoteBuilder, VisitBuilder


def note_request(visit_id: str = "visit-1", created_by: str = PRACTITIONER_ID, **overrides) -> CreateNoteRequest:
    data = {
        "visit_id": visit_id,
        "note_type": NoteType.SOAP,
        "note_data": dict(SOAP_DATA),
        "created_by": created_by,
    }
    data.update(overrides)
    return CreateNoteRequest(**data)


@pytest_asyncio.fixture
async def completed_visit(visit_repository):
    return await visit_repository.add(VisitBuilder().completed().build())


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_document_sign_then_edit_fails(note_guard, completed_visit):
    # Arrange
    note = await note_guard.create(note_request(completed_visit.id, treatment_codes=["97110"]))

    # Act
    signed = await note_guard.sign(note.id, PRACTITIONER_ID)

    # Assert
    assert signed.is_signed is True
    assert signed.signed_by == PRACTITIONER_ID
    assert signed.signed_at is not None
    with pytest.raises(InvalidOperationException) as exc_info:
        await note_guard.update(UpdateNoteRequest(note_id=note.id, additional_notes="late edit"))
    assert exc_info.value.message == "Cannot update a signed note"

    stored = await note_guard.get(note.id)
    assert stored.additional_notes is None
    assert stored.treatment_codes == ["97110"]


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_sign_twice_fails(note_guard, note_repository, completed_visit):
    await note_repository.add(NoteBuilder().for_visit(completed_visit.id).signed().build())

    with pytest.raises(InvalidOperationException) as exc_info:
        await note_guard.sign("note-1", "physio-2")

    assert exc_info.value.message == "Note is already signed"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_second_note_for_visit_is_rejected(note_guard, note_repository, completed_visit):
    await note_guard.create(note_request(completed_visit.id))

    with pytest.raises(DuplicateEntityException) as exc_info:
        await note_guard.create(note_request(completed_visit.id, created_by="physio-2"))

    assert exc_info.value.message == "Visit already has a note"
    assert await note_repository.count_for_visits([completed_visit.id]) == 1


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_outsider_cannot_document_visit(note_guard, note_repository, completed_visit):
    with pytest.raises(EntityNotFoundException) as exc_info:
        await note_guard.create(note_request(completed_visit.id, created_by="physio-elsewhere"))

    assert exc_info.value.message == "Visit not found"
    assert await note_repository.find_by_visit_id(completed_visit.id) is None


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_note_for_missing_visit(note_guard):
    with pytest.raises(EntityNotFoundException) as exc_info:
        await note_guard.create(note_request("missing"))

    assert exc_info.value.message == "Visit not found"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_note_with_incomplete_content(note_guard, note_repository, completed_visit):
    with pytest.raises(ValidationException):
        await note_guard.create(note_request(completed_visit.id, note_data={"subjective": "only this"}))

    assert await note_repository.find_by_visit_id(completed_visit.id) is None


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_update_unsigned_note(note_guard, completed_visit):
    note = await note_guard.create(note_request(completed_visit.id))

    updated = await note_guard.update(
        UpdateNoteRequest(note_id=note.id, additional_notes="Home exercises given", goals={"flexion": 130})
    )

    assert updated.additional_notes == "Home exercises given"
    assert updated.goals == {"flexion": 130}
    assert updated.note_data == SOAP_DATA
    assert updated.version == note.version + 1


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_for_visit_without_note(note_guard, completed_visit):
    with pytest.raises(EntityNotFoundException) as exc_info:
        await note_guard.get_for_visit(completed_visit.id)

    assert exc_info.value.message == "Visit has no note"


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_unknown_note(note_guard):
    with pytest.raises(EntityNotFoundException) as exc_info:
        await note_guard.get("missing")

    assert exc_info.value.message == "Note not found"
