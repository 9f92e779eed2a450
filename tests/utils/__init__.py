"""Test utilities and helpers."""

from tests.utils.assertions import assert_error_envelope, assert_no_double_booking
from tests.utils.builders import (
    CLINIC_ID,
    PATIENT_ID,
    PRACTITIONER_ID,
    SOAP_DATA,
    VISIT_DATE,
    NoteBuilder,
    VisitBuilder,
)
from tests.utils.fakes import (
    InMemoryClinicMembershipRepository,
    InMemoryNoteRepository,
    InMemoryPatientRepository,
    InMemoryVisitRepository,
)

__all__ = [
    # Builders
    "VisitBuilder",
    "NoteBuilder",
    "PATIENT_ID",
    "CLINIC_ID",
    "PRACTITIONER_ID",
    "VISIT_DATE",
    "SOAP_DATA",
    # Fakes
    "InMemoryVisitRepository",
    "InMemoryNoteRepository",
    "InMemoryPatientRepository",
    "InMemoryClinicMembershipRepository",
    # Assertions
    "assert_no_double_booking",
    "assert_error_envelope",
]
