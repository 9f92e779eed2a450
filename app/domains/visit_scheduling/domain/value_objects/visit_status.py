"""
Visit Scheduling Value Objects

Status and type enums for the visit lifecycle.
"""

from app.core.domain import StatusEnum


class VisitStatus(StatusEnum):
    """
    Visit lifecycle states.

    Valid transitions:
    - SCHEDULED -> CHECKED_IN, IN_PROGRESS, CANCELLED, NO_SHOW
    - CHECKED_IN -> IN_PROGRESS, CANCELLED
    - IN_PROGRESS -> COMPLETED, CANCELLED
    - COMPLETED, CANCELLED, NO_SHOW -> (terminal)

    Check-in on a SCHEDULED visit only stamps check_in_time; the status
    stays SCHEDULED and Start goes straight to IN_PROGRESS.
    NO_SHOW is set externally and has no transition operation.
    """

    SCHEDULED = "SCHEDULED"
    CHECKED_IN = "CHECKED_IN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    def can_transition_to(self, new_status: "VisitStatus") -> bool:
        """Check if transition to new status is valid."""
        return new_status in _TRANSITIONS.get(self, frozenset())

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (VisitStatus.COMPLETED, VisitStatus.CANCELLED, VisitStatus.NO_SHOW)

    def blocks_slot(self) -> bool:
        """Check if a visit in this state occupies its time slot."""
        return self not in NON_BLOCKING_STATUSES


_TRANSITIONS: dict[VisitStatus, frozenset[VisitStatus]] = {
    VisitStatus.SCHEDULED: frozenset(
        {VisitStatus.CHECKED_IN, VisitStatus.IN_PROGRESS, VisitStatus.CANCELLED, VisitStatus.NO_SHOW}
    ),
    VisitStatus.CHECKED_IN: frozenset({VisitStatus.IN_PROGRESS, VisitStatus.CANCELLED}),
    VisitStatus.IN_PROGRESS: frozenset({VisitStatus.COMPLETED, VisitStatus.CANCELLED}),
    VisitStatus.COMPLETED: frozenset(),
    VisitStatus.CANCELLED: frozenset(),
    VisitStatus.NO_SHOW: frozenset(),
}

# Visits in these states are ignored by the overlap scan
NON_BLOCKING_STATUSES: frozenset[VisitStatus] = frozenset({VisitStatus.CANCELLED, VisitStatus.NO_SHOW})


class VisitType(StatusEnum):
    """Kind of clinical encounter."""

    INITIAL_CONSULTATION = "INITIAL_CONSULTATION"
    FOLLOW_UP = "FOLLOW_UP"
    REVIEW = "REVIEW"
    EMERGENCY = "EMERGENCY"
