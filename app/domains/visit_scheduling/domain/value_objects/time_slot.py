"""
Time slot value object.

A slot is the half-open interval [start, start + duration) implied by a
visit's scheduled date, wall-clock time and duration.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from app.core.domain import ValidationException, ValueObject

DEFAULT_DURATION_MINUTES = 30

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time(value: str | time) -> time:
    """
    Parse a 24-hour ``HH:MM`` string into a minute-precision time.

    Raises:
        ValidationException: If the value is not a valid ``HH:MM`` time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    match = _TIME_PATTERN.match(value or "")
    if not match:
        raise ValidationException(f"Invalid time '{value}', expected HH:MM (24h)", field="scheduled_time")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def format_time(value: time) -> str:
    """Format a time-of-day as ``HH:MM``."""
    return value.strftime("%H:%M")


def validate_duration(duration_minutes: int | None, default: int = DEFAULT_DURATION_MINUTES) -> int:
    """
    Resolve a visit duration, falling back to the default when unset.

    Raises:
        ValidationException: If the duration is not a positive integer
    """
    if duration_minutes is None:
        return default
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValidationException("Duration must be an integer number of minutes", field="duration_minutes")
    if duration_minutes <= 0:
        raise ValidationException("Duration must be a positive number of minutes", field="duration_minutes")
    return duration_minutes


@dataclass(frozen=True)
class TimeSlot(ValueObject):
    """
    Half-open interval [start, end) on a clinic-local wall clock.

    Adjacent slots (one ends exactly when the other starts) do not overlap.
    """

    start: datetime
    end: datetime

    def _validate(self) -> None:
        if self.end <= self.start:
            raise ValidationException("Time slot must have a positive duration", field="duration_minutes")

    @classmethod
    def from_schedule(cls, scheduled_date: date, scheduled_time: str | time, duration_minutes: int) -> "TimeSlot":
        """
        Build the slot for a visit's date, time-of-day and duration.

        A visit must end by midnight of its scheduled date (ending exactly at
        00:00 is allowed), so every slot lies within the single day that the
        availability check scans.

        Raises:
            ValidationException: If the time is malformed, the duration is not
                positive or the slot runs past midnight
        """
        duration = validate_duration(duration_minutes)
        start = datetime.combine(scheduled_date, parse_time(scheduled_time))
        end = start + timedelta(minutes=duration)
        if end > datetime.combine(scheduled_date + timedelta(days=1), time(0, 0)):
            raise ValidationException(
                f"Visit starting at {format_time(start.time())} for {duration} minutes would run past midnight",
                field="duration_minutes",
            )
        return cls(start=start, end=end)

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps_with(self, other: "TimeSlot") -> bool:
        """Check if two half-open slots share any instant."""
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{self.start.date().isoformat()} {self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"
