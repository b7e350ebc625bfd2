"""Action descriptors for the form and meeting state machines.

Each action kind is its own frozen dataclass with exactly the payload it
needs, so a reject without a reason or a revision request without a
target cannot be constructed. The state machines dispatch on `kind`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from src.domain.models.thesis_form import RevisionTarget
from src.domain.models.time_slot import TimeSlot
from src.domain.models.user import Actor, Role


class FormActionKind(Enum):
    """Kinds of action a user can take on a thesis form."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REQUEST_REVISION = "REQUEST_REVISION"
    SUBMIT_REVISION = "SUBMIT_REVISION"
    EDIT_CONTENT = "EDIT_CONTENT"


class MeetingActionKind(Enum):
    """Kinds of action a user can take on a defense meeting."""

    SUBMIT_AVAILABILITY = "SUBMIT_AVAILABILITY"
    SELECT_TIME_SLOT = "SELECT_TIME_SLOT"
    SCHEDULE = "SCHEDULE"
    SUBMIT_SCORE = "SUBMIT_SCORE"
    CANCEL = "CANCEL"


@dataclass(frozen=True)
class _ActionBase:
    actor: Actor

    @property
    def actor_id(self) -> int:
        return self.actor.id

    @property
    def actor_role(self) -> Role:
        return self.actor.role


@dataclass(frozen=True)
class ApproveForm(_ActionBase):
    """Approve the form at the actor's review tier.

    The manager tier must name the jury; other tiers leave it empty.
    """

    kind: ClassVar[FormActionKind] = FormActionKind.APPROVE
    jury_ids: tuple[int, ...] = field(default=())


@dataclass(frozen=True)
class RejectForm(_ActionBase):
    """Reject the form permanently."""

    kind: ClassVar[FormActionKind] = FormActionKind.REJECT
    reason: str = ""


@dataclass(frozen=True)
class RequestRevision(_ActionBase):
    """Send the form back to `target` with an explanatory message."""

    kind: ClassVar[FormActionKind] = FormActionKind.REQUEST_REVISION
    target: RevisionTarget = RevisionTarget.STUDENT
    message: str = ""


@dataclass(frozen=True)
class SubmitRevision(_ActionBase):
    """Declare a requested revision done and resume review."""

    kind: ClassVar[FormActionKind] = FormActionKind.SUBMIT_REVISION


@dataclass(frozen=True)
class EditFormContent(_ActionBase):
    """Replace title, abstract, and instructor; field is kept when None."""

    kind: ClassVar[FormActionKind] = FormActionKind.EDIT_CONTENT
    title: str = ""
    abstract_text: str = ""
    instructor_id: int = 0
    field_id: int | None = None


@dataclass(frozen=True)
class SubmitAvailability(_ActionBase):
    """A jury member's full availability; replaces any earlier list."""

    kind: ClassVar[MeetingActionKind] = MeetingActionKind.SUBMIT_AVAILABILITY
    time_slots: tuple[TimeSlot, ...] = field(default=())


@dataclass(frozen=True)
class SelectTimeSlot(_ActionBase):
    """The student's choice from the jury intersection."""

    kind: ClassVar[MeetingActionKind] = MeetingActionKind.SELECT_TIME_SLOT
    time_slot: TimeSlot | None = None


@dataclass(frozen=True)
class ScheduleMeeting(_ActionBase):
    """The manager fixes the chosen slot and sets the location."""

    kind: ClassVar[MeetingActionKind] = MeetingActionKind.SCHEDULE
    location: str = ""


@dataclass(frozen=True)
class SubmitScore(_ActionBase):
    kind: ClassVar[MeetingActionKind] = MeetingActionKind.SUBMIT_SCORE
    score: float = 0.0


@dataclass(frozen=True)
class CancelMeeting(_ActionBase):
    kind: ClassVar[MeetingActionKind] = MeetingActionKind.CANCEL
    reason: str | None = None


FormAction = Union[ApproveForm, RejectForm, RequestRevision, SubmitRevision, EditFormContent]

MeetingAction = Union[
    SubmitAvailability, SelectTimeSlot, ScheduleMeeting, SubmitScore, CancelMeeting
]
