"""
Unit tests for Visit Scheduling Repositories.

Tests the data access layer for visits, clinical notes and the
patient/membership directory against a mocked async session.
"""

import uuid
from datetime import UTC, date, datetime, time
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException, DuplicateEntityException
from app.domains.visit_scheduling.application.dto import PractitionerSummary, VisitSearchCriteria
from app.domains.visit_scheduling.domain.entities import ClinicalNote, Visit
from app.domains.visit_scheduling.domain.value_objects import NoteType, VisitStatus, VisitType
from app.domains.visit_scheduling.infrastructure.repositories import (
    SQLAlchemyClinicMembershipRepository,
    SQLAlchemyNoteRepository,
    SQLAlchemyPatientRepository,
    SQLAlchemyVisitRepository,
)
from app.domains.visit_scheduling.infrastructure.persistence.sqlalchemy.models import ClinicMembershipModel
from app.domains.visit_scheduling.infrastructure.repositories.visit_repository import parse_uuid
from tests.utils import SOAP_DATA

VISIT_UUID = uuid.UUID("6f1c2a9e-1b7d-4c2e-9d1f-3a5b7c9e0a11")
PATIENT_UUID = uuid.UUID("0b8e4f2a-5c6d-4e7f-8a9b-1c2d3e4f5a6b")
CLINIC_UUID = uuid.UUID("9a8b7c6d-5e4f-4a3b-2c1d-0e9f8a7b6c5d")
NOTE_UUID = uuid.UUID("1e2d3c4b-5a69-4788-96a5-b4c3d2e1f001")


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_async_session():
    """Create a mock async database session."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_visit_model():
    """Sample SQLAlchemy visit model."""
    model = MagicMock()
    model.id = VISIT_UUID
    model.patient_id = PATIENT_UUID
    model.clinic_id = CLINIC_UUID
    model.practitioner_id = "physio-1"
    model.parent_visit_id = None
    model.scheduled_date = date(2024, 3, 1)
    model.scheduled_time = time(10, 0)
    model.duration_minutes = 45
    model.visit_type = VisitType.INITIAL_CONSULTATION
    model.chief_complaint = "Neck stiffness"
    model.vital_signs = {"bp": "120/80"}
    model.status = VisitStatus.SCHEDULED
    model.check_in_time = None
    model.start_time = None
    model.end_time = None
    model.cancellation_reason = None
    model.cancelled_by = None
    model.cancelled_at = None
    model.created_by = "reception-1"
    model.created_at = datetime(2024, 2, 20, 9, 0, tzinfo=UTC)
    model.updated_at = datetime(2024, 2, 20, 9, 0, tzinfo=UTC)
    model.version = 2
    return model


@pytest.fixture
def sample_visit() -> Visit:
    return Visit(
        id=str(VISIT_UUID),
        patient_id=str(PATIENT_UUID),
        clinic_id=str(CLINIC_UUID),
        practitioner_id="physio-1",
        scheduled_date=date(2024, 3, 1),
        scheduled_time=time(10, 0),
        duration_minutes=30,
        visit_type=VisitType.FOLLOW_UP,
        status=VisitStatus.SCHEDULED,
        version=3,
    )


def execute_result(rowcount: int) -> MagicMock:
    result = MagicMock()
    result.rowcount = rowcount
    return result


# ============================================================================
# Helpers
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        (str(VISIT_UUID), VISIT_UUID),
        (VISIT_UUID, VISIT_UUID),
        ("not-a-uuid", None),
        (None, None),
    ],
)
def test_parse_uuid(value, expected):
    assert parse_uuid(value) == expected


# ============================================================================
# Visit Repository Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_find_by_id_success(mock_async_session, sample_visit_model):
    """Test successfully getting a visit by ID."""
    # Arrange
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = sample_visit_model
    mock_async_session.execute.return_value = mock_result

    repository = SQLAlchemyVisitRepository(mock_async_session)

    # Act
    visit = await repository.find_by_id(str(VISIT_UUID))

    # Assert
    assert visit is not None
    assert visit.id == str(VISIT_UUID)
    assert visit.patient_id == str(PATIENT_UUID)
    assert visit.visit_type == VisitType.INITIAL_CONSULTATION
    assert visit.duration_minutes == 45
    assert visit.vital_signs == {"bp": "120/80"}
    assert visit.version == 2
    assert visit.created_at == sample_visit_model.created_at
    mock_async_session.execute.assert_called_once()


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_find_by_malformed_id(mock_async_session):
    """Malformed ids cannot exist, so the database is not queried."""
    repository = SQLAlchemyVisitRepository(mock_async_session)

    visit = await repository.find_by_id("visit-1")

    assert visit is None
    mock_async_session.execute.assert_not_called()


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_find_slot_holders(mock_async_session, sample_visit_model):
    # Arrange
    mock_result = MagicMock()
    mock_result.scalars.return_value.all.return_value = [sample_visit_model]
    mock_async_session.execute.return_value = mock_result

    repository = SQLAlchemyVisitRepository(mock_async_session)

    # Act
    visits = await repository.find_slot_holders("physio-1", str(CLINIC_UUID), date(2024, 3, 1))

    # Assert
    assert len(visits) == 1
    assert visits[0].practitioner_id == "physio-1"


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_search_returns_total(mock_async_session, sample_visit_model):
    # Arrange
    count_result = MagicMock()
    count_result.scalar.return_value = 7
    page_result = MagicMock()
    page_result.scalars.return_value.all.return_value = [sample_visit_model]
    mock_async_session.execute.side_effect = [count_result, page_result]

    repository = SQLAlchemyVisitRepository(mock_async_session)

    # Act
    visits, total = await repository.search(VisitSearchCriteria(clinic_id=str(CLINIC_UUID)), offset=5, limit=5)

    # Assert
    assert total == 7
    assert [v.id for v in visits] == [str(VISIT_UUID)]
    assert mock_async_session.execute.await_count == 2


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_add_commits(mock_async_session, sample_visit):
    repository = SQLAlchemyVisitRepository(mock_async_session)
    sample_visit.version = 0

    saved = await repository.add(sample_visit)

    mock_async_session.add.assert_called_once()
    mock_async_session.commit.assert_awaited_once()
    assert saved.id == str(VISIT_UUID)
    assert saved.status == VisitStatus.SCHEDULED


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_update_bumps_version(mock_async_session, sample_visit):
    # Arrange
    mock_async_session.execute.return_value = execute_result(1)
    repository = SQLAlchemyVisitRepository(mock_async_session)

    # Act
    saved = await repository.update(sample_visit)

    # Assert
    assert saved.version == 4
    mock_async_session.commit.assert_awaited_once()
    mock_async_session.rollback.assert_not_called()


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_visit_update_stale_version(mock_async_session, sample_visit):
    # Arrange
    mock_async_session.execute.return_value = execute_result(0)
    repository = SQLAlchemyVisitRepository(mock_async_session)

    # Act / Assert
    with pytest.raises(ConcurrencyException) as exc_info:
        await repository.update(sample_visit)

    assert exc_info.value.expected_version == 3
    assert sample_visit.version == 3
    mock_async_session.rollback.assert_awaited_once()
    mock_async_session.commit.assert_not_called()


# ============================================================================
# Note Repository Tests
# ============================================================================


def make_note() -> ClinicalNote:
    return ClinicalNote(
        id=str(NOTE_UUID),
        visit_id=str(VISIT_UUID),
        note_type=NoteType.SOAP,
        note_data=dict(SOAP_DATA),
        created_by="physio-1",
    )


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_note_find_by_visit_id(mock_async_session):
    # Arrange
    model = MagicMock()
    model.id = NOTE_UUID
    model.visit_id = VISIT_UUID
    model.note_type = NoteType.SOAP
    model.note_data = dict(SOAP_DATA)
    model.additional_notes = None
    model.treatment_codes = ["97110"]
    model.treatment_details = None
    model.goals = None
    model.outcome_measures = None
    model.attachments = None
    model.is_signed = True
    model.signed_by = "physio-1"
    model.signed_at = datetime(2024, 3, 1, 11, 0, tzinfo=UTC)
    model.created_by = "physio-1"
    model.created_at = None
    model.updated_at = None
    model.version = 1

    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = model
    mock_async_session.execute.return_value = mock_result

    repository = SQLAlchemyNoteRepository(mock_async_session)

    # Act
    note = await repository.find_by_visit_id(str(VISIT_UUID))

    # Assert
    assert note is not None
    assert note.visit_id == str(VISIT_UUID)
    assert note.is_signed is True
    assert note.treatment_codes == ["97110"]
    assert note.goals == {}


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_note_add_duplicate_visit(mock_async_session):
    """The unique visit_id constraint surfaces as DuplicateEntityException."""
    # Arrange
    mock_async_session.commit.side_effect = IntegrityError("INSERT INTO clinical_notes", {}, Exception("duplicate"))
    repository = SQLAlchemyNoteRepository(mock_async_session)

    # Act / Assert
    with pytest.raises(DuplicateEntityException) as exc_info:
        await repository.add(make_note())

    assert exc_info.value.message == "Visit already has a note"
    mock_async_session.rollback.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_note_update_stale_version(mock_async_session):
    mock_async_session.execute.return_value = execute_result(0)
    repository = SQLAlchemyNoteRepository(mock_async_session)

    with pytest.raises(ConcurrencyException):
        await repository.update(make_note())

    mock_async_session.rollback.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_note_count_for_visits_skips_query_without_ids(mock_async_session):
    repository = SQLAlchemyNoteRepository(mock_async_session)

    assert await repository.count_for_visits(["v-1", "v-2"]) == 0
    mock_async_session.execute.assert_not_called()


# ============================================================================
# Directory Repository Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_patient_exists(mock_async_session):
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = PATIENT_UUID
    mock_async_session.execute.return_value = mock_result

    repository = SQLAlchemyPatientRepository(mock_async_session)

    assert await repository.exists(str(PATIENT_UUID)) is True
    assert await repository.exists("patient-1") is False
    mock_async_session.execute.assert_called_once()


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_membership_lookup(mock_async_session):
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = None
    mock_async_session.execute.return_value = mock_result

    repository = SQLAlchemyClinicMembershipRepository(mock_async_session)

    assert await repository.has_active_membership("physio-9", str(CLINIC_UUID)) is False


def membership(user_id: str, display_name: str, is_admin: bool = False) -> ClinicMembershipModel:
    return ClinicMembershipModel(
        user_id=user_id,
        clinic_id=CLINIC_UUID,
        role="PHYSIOTHERAPIST",
        display_name=display_name,
        is_admin=is_admin,
        is_active=True,
    )


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_list_practitioners(mock_async_session):
    # Arrange
    rows = [
        membership("physio-1", "Dana Reyes", is_admin=True),
        membership("physio-2", "Sam Ortiz"),
        membership("physio-2", "Sam O."),
    ]
    mock_result = MagicMock()
    mock_result.scalars.return_value.all.return_value = rows
    mock_async_session.execute.return_value = mock_result

    repository = SQLAlchemyClinicMembershipRepository(mock_async_session)

    # Act
    roster = await repository.list_practitioners(str(CLINIC_UUID))

    # Assert
    assert roster == [
        PractitionerSummary(user_id="physio-1", name="Dana Reyes", is_admin=True),
        PractitionerSummary(user_id="physio-2", name="Sam Ortiz", is_admin=False),
    ]


@pytest.mark.unit
@pytest.mark.repository
@pytest.mark.asyncio
async def test_list_practitioners_unknown_clinic(mock_async_session):
    repository = SQLAlchemyClinicMembershipRepository(mock_async_session)

    assert await repository.list_practitioners("not-a-uuid") == []
    mock_async_session.execute.assert_not_called()
