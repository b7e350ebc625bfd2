"""Defense meeting repository port.

This module defines the abstract interface for meeting storage. Writes
use the same optimistic version check as thesis forms.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.meeting import Meeting


class MeetingRepositoryProtocol(Protocol):
    """Protocol for meeting persistence."""

    async def get(self, meeting_id: UUID) -> Meeting | None:
        """Retrieve a meeting by ID, or None if not found."""
        ...

    async def get_by_form_id(self, form_id: UUID) -> Meeting | None:
        """Retrieve the meeting spawned by a thesis form, or None."""
        ...

    async def save(self, meeting: Meeting, expected_version: int | None) -> None:
        """Store a meeting snapshot with an optimistic version check.

        Args:
            meeting: The snapshot to store.
            expected_version: Version currently stored, or None on create.

        Raises:
            ConcurrentModificationError: If the stored version differs, or a
                meeting already exists for the same form on create.
        """
        ...

    async def delete(self, meeting_id: UUID) -> None:
        """Delete a meeting.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
        """
        ...

    async def list_for_participant(self, user_id: int) -> list[Meeting]:
        """List meetings where `user_id` is the student or a jury member."""
        ...
