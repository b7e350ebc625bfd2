"""Meeting-specific ordering and idempotence errors.

These are kept separate from InvalidTransitionError so the caller can
report precisely what went wrong (duplicate score, slot not offered).
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from src.domain.exceptions import DefenseWorkflowError

if TYPE_CHECKING:
    from src.domain.models.time_slot import TimeSlot


class AlreadyScoredError(DefenseWorkflowError):
    """Raised when a jury member submits a second score for a meeting.

    Attributes:
        meeting_id: The meeting being scored.
        jury_member_id: The jury member who already scored.
    """

    def __init__(self, meeting_id: UUID, jury_member_id: int) -> None:
        self.meeting_id = meeting_id
        self.jury_member_id = jury_member_id
        super().__init__(
            f"Jury member {jury_member_id} already scored meeting {meeting_id}. "
            "Scores cannot be changed once submitted."
        )


class InvalidTimeSlotError(DefenseWorkflowError):
    """Raised when the student selects a slot outside the jury intersection.

    Attributes:
        meeting_id: The meeting being negotiated.
        time_slot: The rejected slot.
    """

    def __init__(self, meeting_id: UUID, time_slot: TimeSlot) -> None:
        self.meeting_id = meeting_id
        self.time_slot = time_slot
        super().__init__(
            f"Time slot {time_slot.date.isoformat()} {time_slot.time_period.value} "
            f"is not available to every responding jury member of meeting {meeting_id}"
        )
