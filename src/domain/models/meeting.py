"""Defense meeting domain model.

A meeting is created once per thesis form, when the manager approves the
form and assigns the jury. It then collects jury availability, the
student's slot choice, the manager's scheduling, and the jury's scores.

State Machine (see src/domain/services/meeting_state_machine.py):
    JURIES_SELECTED -> JURIES_SPECIFIED_TIME -> STUDENT_SPECIFIED_TIME
        -> SCHEDULED -> COMPLETED
    Any non-terminal state -> CANCELED

Terminal States:
    COMPLETED, CANCELED
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from src.domain.models.time_slot import TimeSlot
from src.domain.models.user import SimpleUser


class MeetingState(Enum):
    """State in the defense meeting lifecycle.

    String spellings are a contract with persistence and must not change.
    """

    JURIES_SELECTED = "JURIES_SELECTED"
    JURIES_SPECIFIED_TIME = "JURIES_SPECIFIED_TIME"
    STUDENT_SPECIFIED_TIME = "STUDENT_SPECIFIED_TIME"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    def is_terminal(self) -> bool:
        return self in MEETING_TERMINAL_STATES

    def has_selected_time_slot(self) -> bool:
        """Check whether a meeting in this state carries a chosen slot."""
        return self in SLOT_SELECTED_STATES


MEETING_TERMINAL_STATES: frozenset[MeetingState] = frozenset(
    {MeetingState.COMPLETED, MeetingState.CANCELED}
)

SLOT_SELECTED_STATES: frozenset[MeetingState] = frozenset(
    {
        MeetingState.STUDENT_SPECIFIED_TIME,
        MeetingState.SCHEDULED,
        MeetingState.COMPLETED,
    }
)

# Jury availability is only collected before the student has chosen
AVAILABILITY_OPEN_STATES: frozenset[MeetingState] = frozenset(
    {MeetingState.JURIES_SELECTED, MeetingState.JURIES_SPECIFIED_TIME}
)


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class Meeting:
    """A thesis defense meeting.

    Mappings are never mutated in place; the state machine builds new
    mappings and returns a new Meeting for every transition.

    Attributes:
        id: Meeting identifier.
        thesis_form_id: The approved form this meeting belongs to (1:1).
        student_id: The thesis author, who selects the time slot.
        instructor_id: The thesis instructor, always a jury member.
        state: Current lifecycle state.
        jury_members: Jury roster, unique by id.
        jury_time_slots: Availability submitted per jury member id.
        location: Set by the manager when scheduling.
        selected_time_slot: Set iff state is STUDENT_SPECIFIED_TIME,
                            SCHEDULED, or COMPLETED.
        juries_scores: Score per jury member id, each written once.
        score: Final mean, set iff state is COMPLETED.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp.
        version: Optimistic concurrency counter.
    """

    id: UUID
    thesis_form_id: UUID
    student_id: int
    instructor_id: int
    jury_members: tuple[SimpleUser, ...]
    state: MeetingState = field(default=MeetingState.JURIES_SELECTED)
    jury_time_slots: Mapping[int, tuple[TimeSlot, ...]] = field(default_factory=dict)
    location: str | None = field(default=None)
    selected_time_slot: TimeSlot | None = field(default=None)
    juries_scores: Mapping[int, float] = field(default_factory=dict)
    score: float | None = field(default=None)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
    version: int = field(default=1)

    def __post_init__(self) -> None:
        """Validate roster and state-dependent field invariants."""
        jury_ids = [member.id for member in self.jury_members]
        if len(set(jury_ids)) != len(jury_ids):
            raise ValueError("jury_members must be unique by id")
        if self.instructor_id not in jury_ids:
            raise ValueError(
                f"instructor {self.instructor_id} must be a jury member"
            )
        if self.state.has_selected_time_slot() != (self.selected_time_slot is not None):
            raise ValueError(
                f"selected_time_slot must be set iff a slot was chosen "
                f"(state={self.state.value})"
            )
        if (self.state == MeetingState.COMPLETED) != (self.score is not None):
            raise ValueError(
                f"score must be set iff the meeting is completed "
                f"(state={self.state.value})"
            )
        outsiders = (set(self.juries_scores) | set(self.jury_time_slots)) - set(jury_ids)
        if outsiders:
            raise ValueError(f"entries recorded for non-jury users: {sorted(outsiders)}")
        if self.version < 1:
            raise ValueError(f"version must be positive, got {self.version}")

    @property
    def jury_ids(self) -> tuple[int, ...]:
        return tuple(member.id for member in self.jury_members)

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal()

    def is_jury_member(self, user_id: int) -> bool:
        return user_id in self.jury_ids

    def evolve(self, **changes: Any) -> Meeting:
        """Return a copy with `changes` applied and the version bumped."""
        return replace(self, version=self.version + 1, **changes)
