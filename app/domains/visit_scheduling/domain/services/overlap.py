"""
Overlap detection for visit slots.

Pure interval arithmetic over already-loaded visits; no data access.
"""

from collections.abc import Iterable

from ..entities.visit import Visit
from ..value_objects import TimeSlot


def find_overlapping_visits(
    candidate: TimeSlot,
    visits: Iterable[Visit],
    exclude_visit_id: str | None = None,
) -> list[Visit]:
    """
    Return the visits whose slot overlaps the candidate slot.

    Visits that do not hold their slot (cancelled, no-show) and the excluded
    visit are skipped, so callers may pass an unfiltered day.

    Args:
        candidate: Slot being requested
        visits: Existing visits for the same practitioner and day
        exclude_visit_id: Visit to ignore (the one being moved)

    Returns:
        Overlapping visits, in input order
    """
    conflicts: list[Visit] = []
    for visit in visits:
        if exclude_visit_id is not None and visit.id == exclude_visit_id:
            continue
        if not visit.blocks_slot:
            continue
        if candidate.overlaps_with(visit.slot):
            conflicts.append(visit)
    return conflicts


def has_overlap(candidate: TimeSlot, visits: Iterable[Visit], exclude_visit_id: str | None = None) -> bool:
    """Check if any visit overlaps the candidate slot."""
    return bool(find_overlapping_visits(candidate, visits, exclude_visit_id))
