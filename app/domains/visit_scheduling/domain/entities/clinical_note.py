"""
Clinical Note Entity

Clinical documentation attached one-to-one to a visit. A note can be
edited freely until it is signed; signing is one-way.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from app.core.domain import (
    AggregateRoot,
    InvalidOperationException,
    generate_uuid_str,
)

from ..value_objects import NoteType, validate_note_data


@dataclass
class ClinicalNote(AggregateRoot[str]):
    """Clinical note aggregate root."""

    visit_id: str = ""
    note_type: NoteType = NoteType.SOAP
    note_data: dict[str, Any] = field(default_factory=dict)
    additional_notes: str | None = None

    # Treatment documentation
    treatment_codes: list[str] = field(default_factory=list)
    treatment_details: dict[str, Any] = field(default_factory=dict)
    goals: dict[str, Any] = field(default_factory=dict)
    outcome_measures: dict[str, Any] = field(default_factory=dict)
    attachments: list[str] = field(default_factory=list)

    # Signature
    is_signed: bool = False
    signed_by: str | None = None
    signed_at: datetime | None = None

    created_by: str | None = None

    def _ensure_unsigned(self, operation: str, message: str) -> None:
        if self.is_signed:
            raise InvalidOperationException(
                operation=operation,
                current_state="signed",
                message=message,
            )

    def update(
        self,
        *,
        note_type: NoteType | None = None,
        note_data: dict[str, Any] | None = None,
        additional_notes: str | None = None,
        treatment_codes: list[str] | None = None,
        treatment_details: dict[str, Any] | None = None,
        goals: dict[str, Any] | None = None,
        outcome_measures: dict[str, Any] | None = None,
        attachments: list[str] | None = None,
    ) -> None:
        """
        Patch an unsigned note. None leaves a field unchanged.

        Changing the note type requires note_data that fits the new template.
        """
        self._ensure_unsigned("update", "Cannot update a signed note")

        new_type = note_type or self.note_type
        if note_data is not None:
            self.note_data = validate_note_data(new_type, note_data)
        elif new_type != self.note_type:
            # Existing content must still fit the new template
            validate_note_data(new_type, self.note_data)
        self.note_type = new_type

        if additional_notes is not None:
            self.additional_notes = additional_notes
        if treatment_codes is not None:
            self.treatment_codes = list(treatment_codes)
        if treatment_details is not None:
            self.treatment_details = dict(treatment_details)
        if goals is not None:
            self.goals = dict(goals)
        if outcome_measures is not None:
            self.outcome_measures = dict(outcome_measures)
        if attachments is not None:
            self.attachments = list(attachments)
        self.touch()

    def sign(self, signed_by: str) -> None:
        """Sign the note. No further changes are accepted afterwards."""
        self._ensure_unsigned("sign", "Note is already signed")

        self.is_signed = True
        self.signed_by = signed_by
        self.signed_at = datetime.now(UTC)
        self.touch()

    @classmethod
    def create(
        cls,
        visit_id: str,
        note_type: NoteType,
        note_data: dict[str, Any],
        created_by: str | None = None,
        additional_notes: str | None = None,
        treatment_codes: list[str] | None = None,
        treatment_details: dict[str, Any] | None = None,
        goals: dict[str, Any] | None = None,
        outcome_measures: dict[str, Any] | None = None,
        attachments: list[str] | None = None,
    ) -> "ClinicalNote":
        """Create an unsigned note with validated content."""
        return cls(
            id=generate_uuid_str(),
            visit_id=visit_id,
            note_type=note_type,
            note_data=validate_note_data(note_type, note_data),
            additional_notes=additional_notes,
            treatment_codes=list(treatment_codes or []),
            treatment_details=dict(treatment_details or {}),
            goals=dict(goals or {}),
            outcome_measures=dict(outcome_measures or {}),
            attachments=list(attachments or []),
            created_by=created_by,
        )
