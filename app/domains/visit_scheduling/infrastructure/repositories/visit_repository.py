"""
Visit Repository Implementation

SQLAlchemy implementation of IVisitRepository.
"""

import logging
import uuid
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import ConcurrencyException
from app.domains.visit_scheduling.application.dto import VisitSearchCriteria
from app.domains.visit_scheduling.application.ports import IVisitRepository
from app.domains.visit_scheduling.domain.entities import Visit
from app.domains.visit_scheduling.domain.value_objects import NON_BLOCKING_STATUSES, VisitStatus, VisitType
from app.domains.visit_scheduling.infrastructure.persistence.sqlalchemy.models import VisitModel

logger = logging.getLogger(__name__)


def parse_uuid(value: Any) -> uuid.UUID | None:
    """Convert an id string to UUID, None when it is not a valid UUID."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


class SQLAlchemyVisitRepository(IVisitRepository):
    """
    SQLAlchemy implementation of visit repository.

    Every write commits immediately so that a booking is durable before the
    caller releases its slot lock.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, visit_id: str) -> Visit | None:
        """Find visit by ID."""
        key = parse_uuid(visit_id)
        if key is None:
            return None
        result = await self.session.execute(select(VisitModel).where(VisitModel.id == key))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_slot_holders(
        self,
        practitioner_id: str,
        clinic_id: str,
        scheduled_date: date,
        exclude_visit_id: str | None = None,
    ) -> list[Visit]:
        """Find the practitioner's non-cancelled, non-no-show visits for the day."""
        clinic_key = parse_uuid(clinic_id)
        if clinic_key is None:
            return []

        conditions = [
            VisitModel.practitioner_id == practitioner_id,
            VisitModel.clinic_id == clinic_key,
            VisitModel.scheduled_date == scheduled_date,
            VisitModel.status.notin_(list(NON_BLOCKING_STATUSES)),
        ]
        exclude_key = parse_uuid(exclude_visit_id)
        if exclude_key is not None:
            conditions.append(VisitModel.id != exclude_key)

        query = select(VisitModel).where(and_(*conditions)).order_by(VisitModel.scheduled_time)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_patient(self, patient_id: str, clinic_id: str | None = None) -> list[Visit]:
        """Find all visits of a patient, most recent first."""
        patient_key = parse_uuid(patient_id)
        if patient_key is None:
            return []

        query = select(VisitModel).where(VisitModel.patient_id == patient_key)
        if clinic_id is not None:
            query = query.where(VisitModel.clinic_id == parse_uuid(clinic_id))
        query = query.order_by(VisitModel.scheduled_date.desc(), VisitModel.scheduled_time.desc())

        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    def _search_conditions(self, criteria: VisitSearchCriteria) -> list[Any]:
        conditions: list[Any] = []
        if criteria.clinic_id:
            conditions.append(VisitModel.clinic_id == parse_uuid(criteria.clinic_id))
        if criteria.patient_id:
            conditions.append(VisitModel.patient_id == parse_uuid(criteria.patient_id))
        if criteria.practitioner_id:
            conditions.append(VisitModel.practitioner_id == criteria.practitioner_id)
        if criteria.status:
            conditions.append(VisitModel.status == criteria.status)
        if criteria.visit_type:
            conditions.append(VisitModel.visit_type == criteria.visit_type)
        if criteria.date_from:
            conditions.append(VisitModel.scheduled_date >= criteria.date_from)
        if criteria.date_to:
            conditions.append(VisitModel.scheduled_date <= criteria.date_to)
        return conditions

    async def search(
        self,
        criteria: VisitSearchCriteria,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Visit], int]:
        """Search visits with filters and pagination."""
        conditions = self._search_conditions(criteria)

        count_query = select(func.count()).select_from(VisitModel)
        query = select(VisitModel)
        if conditions:
            count_query = count_query.where(and_(*conditions))
            query = query.where(and_(*conditions))

        total = (await self.session.execute(count_query)).scalar() or 0

        query = (
            query.order_by(VisitModel.scheduled_date.desc(), VisitModel.scheduled_time.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()], total

    async def add(self, visit: Visit) -> Visit:
        """Insert a new visit and commit."""
        model = self._to_model(visit)
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return self._to_entity(model)

    async def update(self, visit: Visit) -> Visit:
        """Write back a visit if its stored version is unchanged, then commit."""
        expected_version = visit.version
        stmt = (
            update(VisitModel)
            .where(
                and_(
                    VisitModel.id == parse_uuid(visit.id),
                    VisitModel.version == expected_version,
                )
            )
            .values(**self._values(visit), version=expected_version + 1)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            await self.session.rollback()
            logger.warning(f"Stale write rejected for visit {visit.id} at version {expected_version}")
            raise ConcurrencyException(
                entity_type="Visit",
                entity_id=visit.id,
                expected_version=expected_version,
            )

        await self.session.commit()
        visit.increment_version()
        return visit

    # ==================== Mapping ====================

    def _values(self, visit: Visit) -> dict[str, Any]:
        """Column values for an UPDATE."""
        return {
            "practitioner_id": visit.practitioner_id,
            "parent_visit_id": parse_uuid(visit.parent_visit_id),
            "scheduled_date": visit.scheduled_date,
            "scheduled_time": visit.scheduled_time,
            "duration_minutes": visit.duration_minutes,
            "visit_type": visit.visit_type,
            "chief_complaint": visit.chief_complaint,
            "vital_signs": dict(visit.vital_signs),
            "status": visit.status,
            "check_in_time": visit.check_in_time,
            "start_time": visit.start_time,
            "end_time": visit.end_time,
            "cancellation_reason": visit.cancellation_reason,
            "cancelled_by": visit.cancelled_by,
            "cancelled_at": visit.cancelled_at,
            "updated_at": visit.updated_at or datetime.now(UTC),
        }

    def _to_model(self, visit: Visit) -> VisitModel:
        """Convert entity to model."""
        return VisitModel(
            id=parse_uuid(visit.id) or uuid.uuid4(),
            patient_id=parse_uuid(visit.patient_id),
            clinic_id=parse_uuid(visit.clinic_id),
            created_by=visit.created_by,
            created_at=visit.created_at,
            version=visit.version,
            **self._values(visit),
        )

    def _to_entity(self, model: VisitModel) -> Visit:
        """Convert model to entity."""
        visit = Visit(
            id=_str_or_none(model.id),  # type: ignore[arg-type]
            patient_id=str(model.patient_id),
            clinic_id=str(model.clinic_id),
            practitioner_id=model.practitioner_id,  # type: ignore[arg-type]
            parent_visit_id=_str_or_none(model.parent_visit_id),
            scheduled_date=model.scheduled_date,  # type: ignore[arg-type]
            scheduled_time=model.scheduled_time,  # type: ignore[arg-type]
            duration_minutes=model.duration_minutes or 30,  # type: ignore[arg-type]
            visit_type=VisitType(model.visit_type),
            chief_complaint=model.chief_complaint,  # type: ignore[arg-type]
            vital_signs=dict(model.vital_signs or {}),
            status=VisitStatus(model.status),
            check_in_time=model.check_in_time,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            cancellation_reason=model.cancellation_reason,  # type: ignore[arg-type]
            cancelled_by=model.cancelled_by,  # type: ignore[arg-type]
            cancelled_at=model.cancelled_at,  # type: ignore[arg-type]
            created_by=model.created_by,  # type: ignore[arg-type]
            version=model.version or 0,  # type: ignore[arg-type]
        )

        if model.created_at:
            visit.created_at = model.created_at  # type: ignore[assignment]
        if model.updated_at:
            visit.updated_at = model.updated_at  # type: ignore[assignment]

        return visit
