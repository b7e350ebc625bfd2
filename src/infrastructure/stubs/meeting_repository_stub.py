"""Defense meeting repository stub implementation.

In-memory implementation of MeetingRepositoryProtocol with compare-and-swap
on the meeting version and a one-meeting-per-form constraint.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.domain.errors.collaborator import MeetingNotFoundError
from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.models.meeting import Meeting

ENTITY_TYPE = "meeting"


class MeetingRepositoryStub(MeetingRepositoryProtocol):
    """In-memory stub implementation of MeetingRepositoryProtocol.

    Attributes:
        _meetings: Dictionary mapping meeting.id to the stored snapshot.
        _by_form: Index from thesis form id to meeting id.
    """

    def __init__(self) -> None:
        self._meetings: dict[UUID, Meeting] = {}
        self._by_form: dict[UUID, UUID] = {}
        self._cas_lock = asyncio.Lock()

    async def get(self, meeting_id: UUID) -> Meeting | None:
        return self._meetings.get(meeting_id)

    async def get_by_form_id(self, form_id: UUID) -> Meeting | None:
        meeting_id = self._by_form.get(form_id)
        return self._meetings.get(meeting_id) if meeting_id is not None else None

    async def save(self, meeting: Meeting, expected_version: int | None) -> None:
        """Store a snapshot if the stored version matches `expected_version`.

        Raises:
            ConcurrentModificationError: On a version mismatch, or when a
                different meeting already exists for the same form.
        """
        async with self._cas_lock:
            current = self._meetings.get(meeting.id)
            actual_version = current.version if current is not None else None
            if actual_version != expected_version:
                raise ConcurrentModificationError(
                    ENTITY_TYPE, meeting.id, expected_version, actual_version
                )
            # The form -> meeting relation is one-to-one
            existing_id = self._by_form.get(meeting.thesis_form_id)
            if existing_id is not None and existing_id != meeting.id:
                raise ConcurrentModificationError(
                    ENTITY_TYPE,
                    meeting.id,
                    expected_version,
                    self._meetings[existing_id].version,
                )
            self._meetings[meeting.id] = meeting
            self._by_form[meeting.thesis_form_id] = meeting.id

    async def delete(self, meeting_id: UUID) -> None:
        meeting = self._meetings.pop(meeting_id, None)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id=meeting_id)
        self._by_form.pop(meeting.thesis_form_id, None)

    async def list_for_participant(self, user_id: int) -> list[Meeting]:
        matching = [
            meeting
            for meeting in self._meetings.values()
            if meeting.student_id == user_id or meeting.is_jury_member(user_id)
        ]
        matching.sort(key=lambda meeting: meeting.created_at, reverse=True)
        return matching

    # Test helpers

    def clear(self) -> None:
        self._meetings.clear()
        self._by_form.clear()

    def count(self) -> int:
        return len(self._meetings)
