"""
Visit Scheduling SQLAlchemy Models

Database models for visit scheduling persistence.
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID

from app.domains.visit_scheduling.domain.value_objects import NoteType, VisitStatus, VisitType
from app.models.db.base import Base, TimestampMixin


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class PatientModel(Base, TimestampMixin):
    """
    Patient record, owned by the patient registry.

    Only the columns the scheduling engine reads are mapped.
    """

    __tablename__ = "patients"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    clinic_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class ClinicMembershipModel(Base, TimestampMixin):
    """Staff assignment of a user to a clinic."""

    __tablename__ = "clinic_memberships"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    clinic_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    role = Column(String(50), nullable=False, comment="PHYSIOTHERAPIST, RECEPTIONIST, ADMIN, ...")
    display_name = Column(String(200), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False, comment="Clinic administrator rights")
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_clinic_memberships_user_clinic", "user_id", "clinic_id"),)


class VisitModel(Base, TimestampMixin):
    """SQLAlchemy model for Visit entity."""

    __tablename__ = "visits"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    patient_id = Column(UUID(as_uuid=True), ForeignKey("patients.id"), nullable=False, index=True)
    clinic_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    practitioner_id = Column(String(64), nullable=False)
    parent_visit_id = Column(UUID(as_uuid=True), ForeignKey("visits.id"), nullable=True)

    # Scheduling
    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=30)

    # Clinical
    visit_type = Column(
        SQLEnum(VisitType, name="visit_type", values_callable=_enum_values),
        nullable=False,
    )
    chief_complaint = Column(Text, nullable=True)
    vital_signs = Column(JSONB, nullable=False, default=dict)

    # Status
    status = Column(
        SQLEnum(VisitStatus, name="visit_status", values_callable=_enum_values),
        nullable=False,
        default=VisitStatus.SCHEDULED,
        index=True,
    )
    check_in_time = Column(DateTime(timezone=True), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)

    # Cancellation
    cancellation_reason = Column(Text, nullable=True)
    cancelled_by = Column(String(64), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_by = Column(String(64), nullable=True)
    version = Column(Integer, nullable=False, default=0, comment="Optimistic concurrency counter")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_visits_duration_positive"),
        Index("ix_visits_practitioner_day", "practitioner_id", "clinic_id", "scheduled_date"),
        Index("ix_visits_schedule_order", "scheduled_date", "scheduled_time"),
    )

    def __repr__(self) -> str:
        return f"<Visit(id={self.id}, practitioner={self.practitioner_id}, date={self.scheduled_date}, status={self.status})>"


class ClinicalNoteModel(Base, TimestampMixin):
    """SQLAlchemy model for ClinicalNote entity."""

    __tablename__ = "clinical_notes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    visit_id = Column(UUID(as_uuid=True), ForeignKey("visits.id"), nullable=False, unique=True)

    note_type = Column(
        SQLEnum(NoteType, name="note_type", values_callable=_enum_values),
        nullable=False,
    )
    note_data = Column(JSONB, nullable=False, default=dict)
    additional_notes = Column(Text, nullable=True)

    treatment_codes = Column(JSONB, nullable=False, default=list)
    treatment_details = Column(JSONB, nullable=False, default=dict)
    goals = Column(JSONB, nullable=False, default=dict)
    outcome_measures = Column(JSONB, nullable=False, default=dict)
    attachments = Column(JSONB, nullable=False, default=list)

    is_signed = Column(Boolean, nullable=False, default=False)
    signed_by = Column(String(64), nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=True)

    created_by = Column(String(64), nullable=True)
    version = Column(Integer, nullable=False, default=0, comment="Optimistic concurrency counter")

    def __repr__(self) -> str:
        return f"<ClinicalNote(id={self.id}, visit_id={self.visit_id}, signed={self.is_signed})>"
