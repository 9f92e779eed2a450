"""
Clinical Note Repository Implementation

SQLAlchemy implementation of INoteRepository.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException, DuplicateEntityException
from app.domains.visit_scheduling.application.ports import INoteRepository
from app.domains.visit_scheduling.domain.entities import ClinicalNote
from app.domains.visit_scheduling.domain.value_objects import NoteType
from app.domains.visit_scheduling.infrastructure.persistence.sqlalchemy.models import ClinicalNoteModel
from app.domains.visit_scheduling.infrastructure.repositories.visit_repository import parse_uuid

logger = logging.getLogger(__name__)


class SQLAlchemyNoteRepository(INoteRepository):
    """SQLAlchemy implementation of clinical note repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, note_id: str) -> ClinicalNote | None:
        key = parse_uuid(note_id)
        if key is None:
            return None
        result = await self.session.execute(select(ClinicalNoteModel).where(ClinicalNoteModel.id == key))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_visit_id(self, visit_id: str) -> ClinicalNote | None:
        key = parse_uuid(visit_id)
        if key is None:
            return None
        result = await self.session.execute(select(ClinicalNoteModel).where(ClinicalNoteModel.visit_id == key))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def count_for_visits(self, visit_ids: list[str]) -> int:
        keys = [key for key in (parse_uuid(v) for v in visit_ids) if key is not None]
        if not keys:
            return 0
        result = await self.session.execute(
            select(func.count()).select_from(ClinicalNoteModel).where(ClinicalNoteModel.visit_id.in_(keys))
        )
        return result.scalar() or 0

    async def add(self, note: ClinicalNote) -> ClinicalNote:
        """Insert a note; the unique visit_id column rejects a second note."""
        model = self._to_model(note)
        try:
            self.session.add(model)
            await self.session.commit()
        except IntegrityError as e:
            # Concurrent creation for the same visit
            await self.session.rollback()
            logger.warning(f"Duplicate note rejected for visit {note.visit_id}: {e}")
            raise DuplicateEntityException(
                entity_type="Note",
                field="visit_id",
                value=note.visit_id,
                message="Visit already has a note",
            ) from e

        await self.session.refresh(model)
        return self._to_entity(model)

    async def update(self, note: ClinicalNote) -> ClinicalNote:
        """Write back a note if its stored version is unchanged, then commit."""
        expected_version = note.version
        stmt = (
            update(ClinicalNoteModel)
            .where(
                and_(
                    ClinicalNoteModel.id == parse_uuid(note.id),
                    ClinicalNoteModel.version == expected_version,
                )
            )
            .values(**self._values(note), version=expected_version + 1)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            await self.session.rollback()
            logger.warning(f"Stale write rejected for note {note.id} at version {expected_version}")
            raise ConcurrencyException(
                entity_type="Note",
                entity_id=note.id,
                expected_version=expected_version,
            )

        await self.session.commit()
        note.increment_version()
        return note

    # ==================== Mapping ====================

    def _values(self, note: ClinicalNote) -> dict[str, Any]:
        return {
            "note_type": note.note_type,
            "note_data": dict(note.note_data),
            "additional_notes": note.additional_notes,
            "treatment_codes": list(note.treatment_codes),
            "treatment_details": dict(note.treatment_details),
            "goals": dict(note.goals),
            "outcome_measures": dict(note.outcome_measures),
            "attachments": list(note.attachments),
            "is_signed": note.is_signed,
            "signed_by": note.signed_by,
            "signed_at": note.signed_at,
            "updated_at": note.updated_at or datetime.now(UTC),
        }

    def _to_model(self, note: ClinicalNote) -> ClinicalNoteModel:
        return ClinicalNoteModel(
            id=parse_uuid(note.id) or uuid.uuid4(),
            visit_id=parse_uuid(note.visit_id),
            created_by=note.created_by,
            created_at=note.created_at,
            version=note.version,
            **self._values(note),
        )

    def _to_entity(self, model: ClinicalNoteModel) -> ClinicalNote:
        note = ClinicalNote(
            id=str(model.id),
            visit_id=str(model.visit_id),
            note_type=NoteType(model.note_type),
            note_data=dict(model.note_data or {}),
            additional_notes=model.additional_notes,  # type: ignore[arg-type]
            treatment_codes=list(model.treatment_codes or []),
            treatment_details=dict(model.treatment_details or {}),
            goals=dict(model.goals or {}),
            outcome_measures=dict(model.outcome_measures or {}),
            attachments=list(model.attachments or []),
            is_signed=bool(model.is_signed),
            signed_by=model.signed_by,  # type: ignore[arg-type]
            signed_at=model.signed_at,  # type: ignore[arg-type]
            created_by=model.created_by,  # type: ignore[arg-type]
            version=model.version or 0,  # type: ignore[arg-type]
        )

        if model.created_at:
            note.created_at = model.created_at  # type: ignore[assignment]
        if model.updated_at:
            note.updated_at = model.updated_at  # type: ignore[assignment]

        return note
