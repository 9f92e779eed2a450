"""
Visit Scheduling Domain Services
"""

from app.domains.visit_scheduling.domain.services.overlap import (
    find_overlapping_visits,
    has_overlap,
)

__all__ = [
    "find_overlapping_visits",
    "has_overlap",
]
