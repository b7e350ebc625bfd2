"""Payload validation errors."""

from __future__ import annotations

from src.domain.exceptions import DefenseWorkflowError


class ValidationError(DefenseWorkflowError):
    """Raised when an action payload fails a content constraint.

    Covers reason/message length, title and abstract bounds, score range,
    jury composition, and missing required fields.

    Attributes:
        field: Name of the offending field.
        constraint: Human-readable description of the violated constraint.
    """

    def __init__(self, field: str, constraint: str) -> None:
        self.field = field
        self.constraint = constraint
        super().__init__(f"Validation failed for '{field}': {constraint}")
