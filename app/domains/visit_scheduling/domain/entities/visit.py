"""
Visit Entity for Visit Scheduling Domain

Represents one scheduled clinical encounter between a patient and a
practitioner, with its slot and lifecycle state.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any

from app.core.domain import (
    AggregateRoot,
    InvalidOperationException,
    generate_uuid_str,
)

from ..value_objects import (
    DEFAULT_DURATION_MINUTES,
    TimeSlot,
    VisitStatus,
    VisitType,
    VitalSignValue,
    merge_vital_signs,
    parse_time,
    validate_duration,
)


@dataclass
class Visit(AggregateRoot[str]):
    """
    Visit aggregate root.

    Owns the visit state machine. Availability is not checked here; callers
    that move the slot must check it before invoking reschedule().

    Example:
        ```python
        visit = Visit.schedule(
            patient_id="p-1",
            clinic_id="c-1",
            practitioner_id="u-7",
            visit_type=VisitType.FOLLOW_UP,
            scheduled_date=date(2024, 3, 1),
            scheduled_time="10:00",
        )
        visit.check_in({"heart_rate": 72})
        visit.start()
        visit.complete()
        ```
    """

    # References
    patient_id: str = ""
    clinic_id: str = ""
    practitioner_id: str = ""
    parent_visit_id: str | None = None

    # Scheduling
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES

    # Clinical
    visit_type: VisitType = VisitType.INITIAL_CONSULTATION
    chief_complaint: str | None = None
    vital_signs: dict[str, VitalSignValue] = field(default_factory=dict)

    # Status
    status: VisitStatus = VisitStatus.SCHEDULED

    # Timestamps
    check_in_time: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None

    # Cancellation
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None

    created_by: str | None = None

    @property
    def slot(self) -> TimeSlot:
        """Half-open interval occupied by this visit."""
        if self.scheduled_date is None or self.scheduled_time is None:
            raise InvalidOperationException(
                operation="slot",
                current_state=self.status.value,
                message="Visit has no scheduled date and time",
            )
        return TimeSlot.from_schedule(self.scheduled_date, self.scheduled_time, self.duration_minutes)

    @property
    def is_checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def blocks_slot(self) -> bool:
        """Check if this visit counts in the practitioner's availability."""
        return self.status.blocks_slot()

    # Status Transitions

    def check_in(self, vital_signs: dict[str, Any] | None = None) -> None:
        """Mark the patient as arrived. Status stays SCHEDULED."""
        if self.status != VisitStatus.SCHEDULED:
            raise InvalidOperationException(
                operation="check_in",
                current_state=self.status.value,
                message="Visit is not in scheduled status",
            )

        self.vital_signs = merge_vital_signs(self.vital_signs, vital_signs)
        self.check_in_time = datetime.now(UTC)
        self.touch()

    def start(self, vital_signs: dict[str, Any] | None = None) -> None:
        """Start treatment. Requires a prior check-in."""
        if not self.is_checked_in:
            raise InvalidOperationException(
                operation="start",
                current_state=self.status.value,
                message="Patient must check in before starting visit",
            )
        if not self.status.can_transition_to(VisitStatus.IN_PROGRESS):
            raise InvalidOperationException(
                operation="start",
                current_state=self.status.value,
            )

        self.vital_signs = merge_vital_signs(self.vital_signs, vital_signs)
        self.status = VisitStatus.IN_PROGRESS
        self.start_time = datetime.now(UTC)
        self.touch()

    def complete(self) -> None:
        """Complete the visit."""
        if self.status != VisitStatus.IN_PROGRESS:
            raise InvalidOperationException(
                operation="complete",
                current_state=self.status.value,
                message="Visit must be in progress to complete",
            )

        self.status = VisitStatus.COMPLETED
        self.end_time = datetime.now(UTC)
        self.touch()

    def cancel(self, reason: str | None, cancelled_by: str | None) -> None:
        """Cancel the visit, keeping it for history."""
        if self.status == VisitStatus.COMPLETED:
            raise InvalidOperationException(
                operation="cancel",
                current_state=self.status.value,
                message="Cannot cancel a completed visit",
            )
        if not self.status.can_transition_to(VisitStatus.CANCELLED):
            raise InvalidOperationException(
                operation="cancel",
                current_state=self.status.value,
                message=f"Cannot cancel a visit in status {self.status.value}",
            )

        self.status = VisitStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.cancelled_at = datetime.now(UTC)
        self.touch()

    def ensure_reschedulable(self) -> None:
        if self.status.is_terminal():
            raise InvalidOperationException(
                operation="reschedule",
                current_state=self.status.value,
                message="Cannot reschedule a completed or cancelled visit",
            )

    def reschedule(
        self,
        scheduled_date: date,
        scheduled_time: str | time,
        duration_minutes: int | None = None,
    ) -> None:
        """Move the visit to a new slot. Duration is kept when not given."""
        self.ensure_reschedulable()

        self.scheduled_date = scheduled_date
        self.scheduled_time = parse_time(scheduled_time)
        if duration_minutes is not None:
            self.duration_minutes = validate_duration(duration_minutes)
        self.touch()

    # Field updates

    def ensure_editable(self) -> None:
        if self.status.is_terminal():
            raise InvalidOperationException(
                operation="update",
                current_state=self.status.value,
                message=f"Cannot update a visit in status {self.status.value}",
            )

    def update_details(
        self,
        *,
        practitioner_id: str | None = None,
        visit_type: VisitType | None = None,
        chief_complaint: str | None = None,
        parent_visit_id: str | None = None,
        vital_signs: dict[str, Any] | None = None,
    ) -> None:
        """Patch non-slot fields. None leaves a field unchanged."""
        self.ensure_editable()

        if practitioner_id is not None:
            self.practitioner_id = practitioner_id
        if visit_type is not None:
            self.visit_type = visit_type
        if chief_complaint is not None:
            self.chief_complaint = chief_complaint
        if parent_visit_id is not None:
            self.parent_visit_id = parent_visit_id
        if vital_signs:
            self.vital_signs = merge_vital_signs(self.vital_signs, vital_signs)
        self.touch()

    # Factory

    @classmethod
    def schedule(
        cls,
        patient_id: str,
        clinic_id: str,
        practitioner_id: str,
        visit_type: VisitType,
        scheduled_date: date,
        scheduled_time: str | time,
        duration_minutes: int | None = None,
        chief_complaint: str | None = None,
        parent_visit_id: str | None = None,
        vital_signs: dict[str, Any] | None = None,
        created_by: str | None = None,
    ) -> "Visit":
        """Create a new visit in SCHEDULED state with a fresh id."""
        return cls(
            id=generate_uuid_str(),
            patient_id=patient_id,
            clinic_id=clinic_id,
            practitioner_id=practitioner_id,
            parent_visit_id=parent_visit_id,
            scheduled_date=scheduled_date,
            scheduled_time=parse_time(scheduled_time),
            duration_minutes=validate_duration(duration_minutes),
            visit_type=visit_type,
            chief_complaint=chief_complaint,
            vital_signs=merge_vital_signs(None, vital_signs),
            status=VisitStatus.SCHEDULED,
            created_by=created_by,
        )
