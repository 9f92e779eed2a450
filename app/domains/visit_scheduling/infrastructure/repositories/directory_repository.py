"""
Directory Repository Implementations

Read-only SQLAlchemy access to patients and clinic memberships.
"""

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.visit_scheduling.application.dto import PractitionerSummary
from app.domains.visit_scheduling.application.ports import (
    IClinicMembershipRepository,
    IPatientRepository,
)
from app.domains.visit_scheduling.infrastructure.persistence.sqlalchemy.models import (
    ClinicMembershipModel,
    PatientModel,
)
from app.domains.visit_scheduling.infrastructure.repositories.visit_repository import parse_uuid

PRACTITIONER_ROLE = "PHYSIOTHERAPIST"


class SQLAlchemyPatientRepository(IPatientRepository):
    """Patient existence lookups."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(self, patient_id: str) -> bool:
        key = parse_uuid(patient_id)
        if key is None:
            return False
        result = await self.session.execute(select(PatientModel.id).where(PatientModel.id == key))
        return result.scalar_one_or_none() is not None


class SQLAlchemyClinicMembershipRepository(IClinicMembershipRepository):
    """Clinic staff assignments."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def has_active_membership(self, user_id: str, clinic_id: str) -> bool:
        clinic_key = parse_uuid(clinic_id)
        if clinic_key is None:
            return False
        result = await self.session.execute(
            select(ClinicMembershipModel.id)
            .where(
                and_(
                    ClinicMembershipModel.user_id == user_id,
                    ClinicMembershipModel.clinic_id == clinic_key,
                    ClinicMembershipModel.is_active.is_(True),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_practitioners(self, clinic_id: str) -> list[PractitionerSummary]:
        clinic_key = parse_uuid(clinic_id)
        if clinic_key is None:
            return []
        result = await self.session.execute(
            select(ClinicMembershipModel)
            .where(
                and_(
                    ClinicMembershipModel.clinic_id == clinic_key,
                    ClinicMembershipModel.role == PRACTITIONER_ROLE,
                    ClinicMembershipModel.is_active.is_(True),
                )
            )
            .order_by(ClinicMembershipModel.user_id, ClinicMembershipModel.is_admin.desc())
        )

        # Duplicate assignments collapse to the first row (admin first)
        roster: dict[str, PractitionerSummary] = {}
        for membership in result.scalars().all():
            if membership.user_id not in roster:
                roster[membership.user_id] = PractitionerSummary(
                    user_id=membership.user_id,
                    name=membership.display_name,
                    is_admin=bool(membership.is_admin),
                )
        return list(roster.values())
