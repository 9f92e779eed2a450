"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
They should be caught and translated to appropriate HTTP responses in the API layer.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "SCHEDULING_CONFLICT")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Use for malformed times, non-positive durations, unknown enum values, etc.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            "INVALID_OPERATION",
            {"operation": operation, "current_state": current_state},
        )


class ConflictException(DomainException):
    """Raised when a request collides with existing state."""

    def __init__(self, message: str, code: str = "CONFLICT", details: dict[str, Any] | None = None):
        super().__init__(message, code, details)


class SchedulingConflictException(ConflictException):
    """Raised when a requested slot overlaps an existing visit."""

    def __init__(
        self,
        practitioner_id: str | None = None,
        time_slot: str | None = None,
        conflicting_visit_ids: list[str] | None = None,
        message: str | None = None,
        code: str = "SCHEDULING_CONFLICT",
    ):
        self.practitioner_id = practitioner_id
        self.time_slot = time_slot
        self.conflicting_visit_ids = conflicting_visit_ids or []
        msg = message or "Physiotherapist is not available at the requested time"
        details: dict[str, Any] = {}
        if practitioner_id:
            details["practitioner_id"] = practitioner_id
        if time_slot:
            details["time_slot"] = time_slot
        if self.conflicting_visit_ids:
            details["conflicting_visit_ids"] = self.conflicting_visit_ids
        super().__init__(msg, code, details)


class DuplicateEntityException(ConflictException):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: Any, message: str | None = None):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(
            message or f"{entity_type} with {field}='{value}' already exists",
            "DUPLICATE_ENTITY",
            {
                "entity_type": entity_type,
                "field": field,
                "value": str(value),
            },
        )


class ConcurrencyException(DomainException):
    """Raised when there's a concurrency conflict (optimistic locking)."""

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int, actual_version: int | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        found = "a newer version" if actual_version is None else f"version {actual_version}"
        super().__init__(
            f"Concurrency conflict for {entity_type} {entity_id}. Expected version {expected_version}, but found {found}",
            "CONCURRENCY_CONFLICT",
            {
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
