"""
Clinical Note Repository Port
"""

from typing import Protocol, runtime_checkable

from app.domains.visit_scheduling.domain.entities import ClinicalNote


@runtime_checkable
class INoteRepository(Protocol):
    """Clinical note repository interface."""

    async def find_by_id(self, note_id: str) -> ClinicalNote | None:
        """Find a note by ID."""
        ...

    async def find_by_visit_id(self, visit_id: str) -> ClinicalNote | None:
        """Find the note attached to a visit, if any."""
        ...

    async def count_for_visits(self, visit_ids: list[str]) -> int:
        """Count how many of the given visits have a note."""
        ...

    async def add(self, note: ClinicalNote) -> ClinicalNote:
        """
        Persist a new note.

        Raises:
            DuplicateEntityException: If the visit already has a note
        """
        ...

    async def update(self, note: ClinicalNote) -> ClinicalNote:
        """
        Write back a modified note, guarded by its version.

        Raises:
            ConcurrencyException: If the note was modified concurrently
        """
        ...
