"""Transition results and side-effect commands.

Every accepted transition produces a new entity snapshot together with
the side effects the caller must carry out (persist, create the meeting,
notify participants). The pure state machines never perform them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Generic, TypeVar, Union
from uuid import UUID

from src.domain.models.meeting import Meeting, MeetingState
from src.domain.models.thesis_form import FormState, ThesisForm
from src.domain.models.user import Role


class NotificationEvent(Enum):
    """Workflow events participants are notified about."""

    FORM_SUBMITTED = "FORM_SUBMITTED"
    FORM_APPROVED = "FORM_APPROVED"
    FORM_REJECTED = "FORM_REJECTED"
    FORM_REVISION_REQUESTED = "FORM_REVISION_REQUESTED"
    FORM_REVISION_SUBMITTED = "FORM_REVISION_SUBMITTED"
    MEETING_CREATED = "MEETING_CREATED"
    AVAILABILITY_UPDATED = "AVAILABILITY_UPDATED"
    TIME_SLOT_SELECTED = "TIME_SLOT_SELECTED"
    MEETING_SCHEDULED = "MEETING_SCHEDULED"
    MEETING_COMPLETED = "MEETING_COMPLETED"
    MEETING_CANCELED = "MEETING_CANCELED"


@dataclass(frozen=True)
class PersistForm:
    form: ThesisForm
    expected_version: int | None


@dataclass(frozen=True)
class PersistMeeting:
    meeting: Meeting
    expected_version: int | None


@dataclass(frozen=True)
class CreateMeeting:
    """Create the defense meeting spawned by the manager's approval."""

    meeting: Meeting


@dataclass(frozen=True)
class NotifyParticipants:
    """Tell `recipient_ids` about `event` on entity `entity_id`.

    `recipient_roles` addresses everyone holding a role (e.g. all admins)
    when no individual recipient is known.
    """

    event: NotificationEvent
    entity_id: UUID
    recipient_ids: tuple[int, ...]
    recipient_roles: tuple[Role, ...] = ()
    detail: str | None = None


SideEffect = Union[PersistForm, PersistMeeting, CreateMeeting, NotifyParticipants]

EntityT = TypeVar("EntityT", ThesisForm, Meeting)
StateT = TypeVar("StateT", FormState, MeetingState)


@dataclass(frozen=True)
class TransitionResult(Generic[EntityT, StateT]):
    """Outcome of an accepted transition.

    Attributes:
        previous_state: State before the action.
        new_state: State after the action (may equal previous_state).
        entity: The new entity snapshot.
        updated_fields: Names of the entity fields that changed.
        side_effects: Commands for the caller, in execution order.
    """

    previous_state: StateT
    new_state: StateT
    entity: EntityT
    updated_fields: frozenset[str] = field(default_factory=frozenset)
    side_effects: tuple[SideEffect, ...] = field(default=())

    @property
    def changed(self) -> bool:
        return bool(self.updated_fields)

    def effects_of_type(self, effect_type: type) -> list[SideEffect]:
        return [effect for effect in self.side_effects if isinstance(effect, effect_type)]


FormTransitionResult = TransitionResult[ThesisForm, FormState]
MeetingTransitionResult = TransitionResult[Meeting, MeetingState]


def changed_fields(before: ThesisForm | Meeting, after: ThesisForm | Meeting) -> frozenset[str]:
    """Names of the dataclass fields whose values differ, ignoring `version`."""
    return frozenset(
        f.name
        for f in fields(before)
        if f.name != "version" and getattr(before, f.name) != getattr(after, f.name)
    )
