"""Thesis form repository port.

This module defines the abstract interface for thesis form storage.

Developer Golden Rules:
1. CAS ON EVERY WRITE - save() compares the stored version with
   `expected_version` and refuses stale writes
2. FAIL LOUD - Repository raises on errors; the service wraps them
3. NO LOGIC - Repository stores snapshots; transitions are decided elsewhere
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.thesis_form import FormState, ThesisForm


class ThesisFormRepositoryProtocol(Protocol):
    """Protocol for thesis form persistence.

    Implementations may use a relational store, in-memory storage, or
    other backends.
    """

    async def get(self, form_id: UUID) -> ThesisForm | None:
        """Retrieve a thesis form by ID.

        Args:
            form_id: The form identifier.

        Returns:
            The form if found, None otherwise.
        """
        ...

    async def save(self, form: ThesisForm, expected_version: int | None) -> None:
        """Store a form snapshot with an optimistic version check.

        Args:
            form: The snapshot to store.
            expected_version: Version currently stored, or None when the
                form must not exist yet.

        Raises:
            ConcurrentModificationError: If the stored version differs from
                `expected_version` (or the form already exists on create).
        """
        ...

    async def delete(self, form_id: UUID) -> None:
        """Delete a form (administrative deletion).

        Raises:
            FormNotFoundError: If the form does not exist.
        """
        ...

    async def list_by_states(
        self,
        states: frozenset[FormState],
        instructor_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[ThesisForm], int]:
        """List forms whose state is in `states`, newest first.

        Args:
            states: States to match.
            instructor_id: Only forms assigned to this instructor, if given.
            limit: Page size.
            offset: Number of matching forms to skip.

        Returns:
            Tuple of (page of forms, total count matching).
        """
        ...

    async def list_by_student(self, student_id: int) -> list[ThesisForm]:
        """List a student's forms, newest first."""
        ...
