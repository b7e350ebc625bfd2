"""Thesis form repository stub implementation.

This module provides an in-memory stub implementation of
ThesisFormRepositoryProtocol for development and testing purposes.
Writes simulate the relational store's `UPDATE ... WHERE version = ?`
with a lock.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from src.application.ports.thesis_form_repository import ThesisFormRepositoryProtocol
from src.domain.errors.collaborator import FormNotFoundError
from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.models.thesis_form import FormState, ThesisForm

ENTITY_TYPE = "thesis_form"


class ThesisFormRepositoryStub(ThesisFormRepositoryProtocol):
    """In-memory stub implementation of ThesisFormRepositoryProtocol.

    It is NOT suitable for production use.

    Attributes:
        _forms: Dictionary mapping form.id to the stored snapshot.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._forms: dict[UUID, ThesisForm] = {}
        # Lock for simulating atomic CAS operations
        self._cas_lock = asyncio.Lock()

    async def get(self, form_id: UUID) -> ThesisForm | None:
        return self._forms.get(form_id)

    async def save(self, form: ThesisForm, expected_version: int | None) -> None:
        """Store a snapshot if the stored version matches `expected_version`.

        Raises:
            ConcurrentModificationError: On a version mismatch, or when
                `expected_version` is None and the form already exists.
        """
        async with self._cas_lock:
            current = self._forms.get(form.id)
            actual_version = current.version if current is not None else None
            if actual_version != expected_version:
                raise ConcurrentModificationError(
                    ENTITY_TYPE, form.id, expected_version, actual_version
                )
            self._forms[form.id] = form

    async def delete(self, form_id: UUID) -> None:
        if self._forms.pop(form_id, None) is None:
            raise FormNotFoundError(form_id)

    async def list_by_states(
        self,
        states: frozenset[FormState],
        instructor_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[ThesisForm], int]:
        """List forms in `states`, ordered by updated_at desc."""
        matching = [
            form
            for form in self._forms.values()
            if form.state in states
            and (instructor_id is None or form.instructor_id == instructor_id)
        ]
        matching.sort(key=lambda form: form.updated_at, reverse=True)
        total = len(matching)
        return matching[offset : offset + limit], total

    async def list_by_student(self, student_id: int) -> list[ThesisForm]:
        owned = [form for form in self._forms.values() if form.student_id == student_id]
        owned.sort(key=lambda form: form.created_at, reverse=True)
        return owned

    # Test helpers

    def clear(self) -> None:
        """Clear all stored forms (for testing)."""
        self._forms.clear()

    def count(self) -> int:
        return len(self._forms)
