"""
Clinical note templates.

Each note type is a closed, structured template; ``note_data`` must carry
the sections of its template as text.
"""

from typing import Any

from app.core.domain import StatusEnum, ValidationException


class NoteType(StatusEnum):
    """Supported clinical note templates."""

    SOAP = "SOAP"
    BAP = "BAP"
    PROGRESS = "Progress"

    @property
    def required_sections(self) -> tuple[str, ...]:
        return _SECTIONS[self]


_SECTIONS: dict[NoteType, tuple[str, ...]] = {
    NoteType.SOAP: ("subjective", "objective", "assessment", "plan"),
    NoteType.BAP: ("behavior", "assessment", "plan"),
    NoteType.PROGRESS: ("progressNote",),
}


def validate_note_data(note_type: NoteType, note_data: Any) -> dict[str, Any]:
    """
    Check that note_data matches the template of its note type.

    Unknown extra keys are kept as-is; the template sections must be present
    and hold strings.

    Raises:
        ValidationException: If a section is missing or is not text
    """
    if not isinstance(note_data, dict):
        raise ValidationException("note_data must be an object", field="note_data")

    missing = [section for section in note_type.required_sections if section not in note_data]
    if missing:
        raise ValidationException(
            f"{note_type.value} note is missing sections: {', '.join(missing)}",
            field="note_data",
            details={"missing": missing, "note_type": note_type.value},
        )

    for section in note_type.required_sections:
        if not isinstance(note_data[section], str):
            raise ValidationException(
                f"Section '{section}' of a {note_type.value} note must be text",
                field="note_data",
            )

    return dict(note_data)
