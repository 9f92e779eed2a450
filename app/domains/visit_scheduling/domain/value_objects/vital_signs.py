"""
Vital signs bag.

Vital signs are an open map of string keys to scalar readings. Each write
merges into the existing snapshot instead of replacing it.
"""

from typing import Any

from app.core.domain import ValidationException

VitalSignValue = str | int | float | bool | None

_SCALAR_TYPES = (str, int, float, bool, type(None))


def merge_vital_signs(
    current: dict[str, VitalSignValue] | None,
    incoming: dict[str, Any] | None,
) -> dict[str, VitalSignValue]:
    """
    Merge incoming readings over the current snapshot.

    Returns a new dict; neither argument is modified.

    Raises:
        ValidationException: If a key is not a string or a value is not a scalar
    """
    merged: dict[str, VitalSignValue] = dict(current or {})
    if not incoming:
        return merged

    for key, value in incoming.items():
        if not isinstance(key, str) or not key:
            raise ValidationException("Vital sign names must be non-empty strings", field="vital_signs")
        if not isinstance(value, _SCALAR_TYPES):
            raise ValidationException(
                f"Vital sign '{key}' must be a scalar value",
                field="vital_signs",
            )
        merged[key] = value

    return merged
