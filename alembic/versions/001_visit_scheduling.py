"""Visit scheduling schema.

Revision ID: 001_visit_scheduling
Revises: None
Create Date: 2026-10-19

Tables created:
- patients: patient registry columns read by scheduling
- clinic_memberships: staff assignments (note authors, practitioner roster)
- visits: scheduled encounters with lifecycle state
- clinical_notes: one note per visit, immutable once signed
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_visit_scheduling"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

VISIT_TYPE = ENUM(
    "INITIAL_CONSULTATION",
    "FOLLOW_UP",
    "REVIEW",
    "EMERGENCY",
    name="visit_type",
    create_type=False,
)
VISIT_STATUS = ENUM(
    "SCHEDULED",
    "CHECKED_IN",
    "IN_PROGRESS",
    "COMPLETED",
    "CANCELLED",
    "NO_SHOW",
    name="visit_status",
    create_type=False,
)
NOTE_TYPE = ENUM("SOAP", "BAP", "Progress", name="note_type", create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    """Create scheduling tables and enum types."""
    bind = op.get_bind()
    VISIT_TYPE.create(bind, checkfirst=True)
    VISIT_STATUS.create(bind, checkfirst=True)
    NOTE_TYPE.create(bind, checkfirst=True)

    # =========================================================================
    # patients
    # =========================================================================
    op.create_table(
        "patients",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("clinic_id", UUID(as_uuid=True), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_patients_clinic_id", "patients", ["clinic_id"])

    # =========================================================================
    # clinic_memberships
    # =========================================================================
    op.create_table(
        "clinic_memberships",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("clinic_id", UUID(as_uuid=True), nullable=False),
        sa.Column("role", sa.String(50), nullable=False, comment="PHYSIOTHERAPIST, RECEPTIONIST, ADMIN, ..."),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column(
            "is_admin",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
            comment="Clinic administrator rights",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_clinic_memberships_user_id", "clinic_memberships", ["user_id"])
    op.create_index("ix_clinic_memberships_clinic_id", "clinic_memberships", ["clinic_id"])
    op.create_index("ix_clinic_memberships_user_clinic", "clinic_memberships", ["user_id", "clinic_id"])

    # =========================================================================
    # visits
    # =========================================================================
    op.create_table(
        "visits",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("patient_id", UUID(as_uuid=True), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("clinic_id", UUID(as_uuid=True), nullable=False),
        sa.Column("practitioner_id", sa.String(64), nullable=False),
        sa.Column("parent_visit_id", UUID(as_uuid=True), sa.ForeignKey("visits.id"), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("visit_type", VISIT_TYPE, nullable=False),
        sa.Column("chief_complaint", sa.Text(), nullable=True),
        sa.Column("vital_signs", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("status", VISIT_STATUS, nullable=False, server_default="SCHEDULED"),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_by", sa.String(64), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Optimistic concurrency counter",
        ),
        *_timestamps(),
        sa.CheckConstraint("duration_minutes > 0", name="ck_visits_duration_positive"),
    )
    op.create_index("ix_visits_patient_id", "visits", ["patient_id"])
    op.create_index("ix_visits_clinic_id", "visits", ["clinic_id"])
    op.create_index("ix_visits_status", "visits", ["status"])
    # Availability scan: one practitioner, one clinic, one day
    op.create_index("ix_visits_practitioner_day", "visits", ["practitioner_id", "clinic_id", "scheduled_date"])
    op.create_index("ix_visits_schedule_order", "visits", ["scheduled_date", "scheduled_time"])

    # =========================================================================
    # clinical_notes
    # =========================================================================
    op.create_table(
        "clinical_notes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("visit_id", UUID(as_uuid=True), sa.ForeignKey("visits.id"), nullable=False, unique=True),
        sa.Column("note_type", NOTE_TYPE, nullable=False),
        sa.Column("note_data", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("additional_notes", sa.Text(), nullable=True),
        sa.Column("treatment_codes", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("treatment_details", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("goals", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("outcome_measures", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("attachments", JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("is_signed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("signed_by", sa.String(64), nullable=True),
        sa.Column("signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Optimistic concurrency counter",
        ),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop scheduling tables and enum types."""
    op.drop_table("clinical_notes")
    op.drop_index("ix_visits_schedule_order", table_name="visits")
    op.drop_index("ix_visits_practitioner_day", table_name="visits")
    op.drop_index("ix_visits_status", table_name="visits")
    op.drop_index("ix_visits_clinic_id", table_name="visits")
    op.drop_index("ix_visits_patient_id", table_name="visits")
    op.drop_table("visits")
    op.drop_index("ix_clinic_memberships_user_clinic", table_name="clinic_memberships")
    op.drop_index("ix_clinic_memberships_clinic_id", table_name="clinic_memberships")
    op.drop_index("ix_clinic_memberships_user_id", table_name="clinic_memberships")
    op.drop_table("clinic_memberships")
    op.drop_index("ix_patients_clinic_id", table_name="patients")
    op.drop_table("patients")

    bind = op.get_bind()
    NOTE_TYPE.drop(bind, checkfirst=True)
    VISIT_STATUS.drop(bind, checkfirst=True)
    VISIT_TYPE.drop(bind, checkfirst=True)
