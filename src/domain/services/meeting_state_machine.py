"""Defense meeting state machine.

Pure decision logic for the meeting lifecycle. Given the current meeting
snapshot and an action, decides whether the action is allowed and returns
the new snapshot plus the side effects the caller must perform.

Lifecycle:
    JURIES_SELECTED --(first jury availability)--> JURIES_SPECIFIED_TIME
    JURIES_SPECIFIED_TIME --(student picks an intersected slot)--> STUDENT_SPECIFIED_TIME
    STUDENT_SPECIFIED_TIME --(manager sets location)--> SCHEDULED
    SCHEDULED --(last jury score)--> COMPLETED
    any non-terminal --(manager/admin cancels)--> CANCELED

Dispatch goes through a single (state, action kind) table; each entry
names the party allowed to act and the state reached.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from src.config.defense_config import (
    DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    DefenseWorkflowConfig,
    JuryPolicy,
)
from src.domain.errors.authorization import NotAuthorizedError
from src.domain.errors.meeting import InvalidTimeSlotError
from src.domain.errors.state_transition import (
    AlreadyTerminalError,
    InvalidTransitionError,
)
from src.domain.errors.validation import ValidationError
from src.domain.models.actions import (
    CancelMeeting,
    MeetingAction,
    MeetingActionKind,
    ScheduleMeeting,
    SelectTimeSlot,
    SubmitAvailability,
    SubmitScore,
)
from src.domain.models.meeting import AVAILABILITY_OPEN_STATES, Meeting, MeetingState
from src.domain.models.thesis_form import ThesisForm
from src.domain.models.transition import (
    MeetingTransitionResult,
    NotificationEvent,
    NotifyParticipants,
    PersistMeeting,
    SideEffect,
    TransitionResult,
    changed_fields,
)
from src.domain.models.user import Actor, Role, SimpleUser
from src.domain.services.availability_aggregator import (
    compute_intersection,
    normalize_slots,
)
from src.domain.services.scoring_aggregator import (
    compute_final_score,
    is_scoring_complete,
    record_score,
    validate_score,
)

ENTITY_TYPE = "meeting"


class MeetingParty(Enum):
    """Parties that act on a meeting."""

    JURY_MEMBER = "JURY_MEMBER"
    STUDENT = "STUDENT"
    MANAGER = "MANAGER"
    ADMINISTRATION = "ADMINISTRATION"

    def describe(self) -> str:
        return _PARTY_DESCRIPTIONS[self]


_PARTY_DESCRIPTIONS: dict[MeetingParty, str] = {
    MeetingParty.JURY_MEMBER: "a member of the meeting's jury",
    MeetingParty.STUDENT: "the thesis student",
    MeetingParty.MANAGER: "a manager",
    MeetingParty.ADMINISTRATION: "a manager or an admin",
}


@dataclass(frozen=True)
class MeetingTransitionRule:
    party: MeetingParty
    to_state: MeetingState


def _cancel_rules() -> dict[tuple[MeetingState, MeetingActionKind], MeetingTransitionRule]:
    return {
        (state, MeetingActionKind.CANCEL): MeetingTransitionRule(
            MeetingParty.ADMINISTRATION, MeetingState.CANCELED
        )
        for state in MeetingState
        if not state.is_terminal()
    }


MEETING_TRANSITIONS: dict[tuple[MeetingState, MeetingActionKind], MeetingTransitionRule] = {
    **{
        (state, MeetingActionKind.SUBMIT_AVAILABILITY): MeetingTransitionRule(
            MeetingParty.JURY_MEMBER, MeetingState.JURIES_SPECIFIED_TIME
        )
        for state in AVAILABILITY_OPEN_STATES
    },
    (MeetingState.JURIES_SPECIFIED_TIME, MeetingActionKind.SELECT_TIME_SLOT): MeetingTransitionRule(
        MeetingParty.STUDENT, MeetingState.STUDENT_SPECIFIED_TIME
    ),
    (MeetingState.STUDENT_SPECIFIED_TIME, MeetingActionKind.SCHEDULE): MeetingTransitionRule(
        MeetingParty.MANAGER, MeetingState.SCHEDULED
    ),
    # Reaching COMPLETED is decided by the scoring aggregator, not the table
    (MeetingState.SCHEDULED, MeetingActionKind.SUBMIT_SCORE): MeetingTransitionRule(
        MeetingParty.JURY_MEMBER, MeetingState.SCHEDULED
    ),
    **_cancel_rules(),
}


def actor_parties(meeting: Meeting, actor: Actor) -> frozenset[MeetingParty]:
    """Resolve which meeting parties `actor` can act as."""
    parties: set[MeetingParty] = set()
    if actor.role.is_professor() and meeting.is_jury_member(actor.id):
        parties.add(MeetingParty.JURY_MEMBER)
    if actor.role is Role.STUDENT and actor.id == meeting.student_id:
        parties.add(MeetingParty.STUDENT)
    if actor.role is Role.MANAGER:
        parties.add(MeetingParty.MANAGER)
    if actor.role in (Role.MANAGER, Role.ADMIN):
        parties.add(MeetingParty.ADMINISTRATION)
    return frozenset(parties)


def create_meeting(
    form: ThesisForm,
    jury_ids: tuple[int, ...],
    jury_roster: Mapping[int, SimpleUser] | None,
    *,
    policy: JuryPolicy,
    now: datetime,
    meeting_id: UUID | None = None,
) -> Meeting:
    """Build the meeting spawned by the manager's approval of `form`.

    Args:
        form: The form being approved.
        jury_ids: Requested jury member ids, in display order.
        jury_roster: Professors by id; every jury id must resolve here.
        policy: Jury size bounds.
        now: Creation timestamp.
        meeting_id: Identifier for the new meeting (generated if omitted).

    Returns:
        A new Meeting in JURIES_SELECTED.

    Raises:
        ValidationError: If the jury is empty, has duplicates, violates the
            size bounds, omits the instructor, or names a non-professor.
    """
    if not jury_ids:
        raise ValidationError("jury_ids", f"a jury of {policy.describe()} is required")
    if len(set(jury_ids)) != len(jury_ids):
        raise ValidationError("jury_ids", "jury members must be unique")
    if len(jury_ids) < policy.min_jury_count or (
        policy.max_jury_count is not None and len(jury_ids) > policy.max_jury_count
    ):
        raise ValidationError(
            "jury_ids",
            f"must contain {policy.describe()}, got {len(jury_ids)}",
        )
    if form.instructor_id not in jury_ids:
        raise ValidationError("jury_ids", "the thesis instructor must be a jury member")
    if jury_roster is None:
        raise ValidationError("jury_ids", "the professor roster is required to assign a jury")
    unknown = [jury_id for jury_id in jury_ids if jury_id not in jury_roster]
    if unknown:
        raise ValidationError("jury_ids", f"users {unknown} are not professors")

    return Meeting(
        id=meeting_id or uuid4(),
        thesis_form_id=form.id,
        student_id=form.student_id,
        instructor_id=form.instructor_id,
        jury_members=tuple(jury_roster[jury_id] for jury_id in jury_ids),
        state=MeetingState.JURIES_SELECTED,
        created_at=now,
        updated_at=now,
    )


@dataclass(frozen=True)
class _Context:
    meeting: Meeting
    rule: MeetingTransitionRule
    now: datetime
    config: DefenseWorkflowConfig


_Outcome = tuple[Meeting, list[SideEffect]]


def _submit_availability(ctx: _Context, action: SubmitAvailability) -> _Outcome:
    meeting = ctx.meeting
    slots = normalize_slots(action.time_slots)
    if not slots:
        raise ValidationError("time_slots", "at least one time slot is required")

    submissions = dict(meeting.jury_time_slots)
    submissions[action.actor_id] = slots
    if submissions == dict(meeting.jury_time_slots) and meeting.state == ctx.rule.to_state:
        return meeting, []

    updated = meeting.evolve(
        state=ctx.rule.to_state,
        jury_time_slots=submissions,
        updated_at=ctx.now,
    )
    return updated, [
        NotifyParticipants(
            event=NotificationEvent.AVAILABILITY_UPDATED,
            entity_id=meeting.id,
            recipient_ids=(meeting.student_id,),
        )
    ]


def _select_time_slot(ctx: _Context, action: SelectTimeSlot) -> _Outcome:
    meeting = ctx.meeting
    if action.time_slot is None:
        raise ValidationError("time_slot", "a time slot is required")
    if action.time_slot not in compute_intersection(meeting.jury_time_slots):
        raise InvalidTimeSlotError(meeting.id, action.time_slot)

    updated = meeting.evolve(
        state=ctx.rule.to_state,
        selected_time_slot=action.time_slot,
        updated_at=ctx.now,
    )
    return updated, [
        NotifyParticipants(
            event=NotificationEvent.TIME_SLOT_SELECTED,
            entity_id=meeting.id,
            recipient_ids=meeting.jury_ids,
            recipient_roles=(Role.MANAGER,),
        )
    ]


def _schedule(ctx: _Context, action: ScheduleMeeting) -> _Outcome:
    meeting = ctx.meeting
    location = action.location.strip()
    if not location:
        raise ValidationError("location", "must not be empty")

    updated = meeting.evolve(
        state=ctx.rule.to_state,
        location=location,
        updated_at=ctx.now,
    )
    return updated, [
        NotifyParticipants(
            event=NotificationEvent.MEETING_SCHEDULED,
            entity_id=meeting.id,
            recipient_ids=(meeting.student_id, *meeting.jury_ids),
        )
    ]


def _submit_score(ctx: _Context, action: SubmitScore) -> _Outcome:
    meeting = ctx.meeting
    scoring = ctx.config.scoring
    value = validate_score(action.score, scoring)
    scores = record_score(meeting.id, meeting.juries_scores, action.actor_id, value)

    if not is_scoring_complete(scores, meeting.jury_ids):
        return meeting.evolve(juries_scores=scores, updated_at=ctx.now), []

    final_score = compute_final_score(scores, scoring.decimal_places)
    updated = meeting.evolve(
        state=MeetingState.COMPLETED,
        juries_scores=scores,
        score=final_score,
        updated_at=ctx.now,
    )
    return updated, [
        NotifyParticipants(
            event=NotificationEvent.MEETING_COMPLETED,
            entity_id=meeting.id,
            recipient_ids=(meeting.student_id, *meeting.jury_ids),
            detail=f"{final_score:.2f}",
        )
    ]


def _cancel(ctx: _Context, action: CancelMeeting) -> _Outcome:
    meeting = ctx.meeting
    updated = meeting.evolve(
        state=ctx.rule.to_state,
        selected_time_slot=None,
        updated_at=ctx.now,
    )
    return updated, [
        NotifyParticipants(
            event=NotificationEvent.MEETING_CANCELED,
            entity_id=meeting.id,
            recipient_ids=(meeting.student_id, *meeting.jury_ids),
            detail=action.reason,
        )
    ]


_HANDLERS: dict[MeetingActionKind, Callable[[_Context, MeetingAction], _Outcome]] = {
    MeetingActionKind.SUBMIT_AVAILABILITY: _submit_availability,  # type: ignore[dict-item]
    MeetingActionKind.SELECT_TIME_SLOT: _select_time_slot,  # type: ignore[dict-item]
    MeetingActionKind.SCHEDULE: _schedule,  # type: ignore[dict-item]
    MeetingActionKind.SUBMIT_SCORE: _submit_score,  # type: ignore[dict-item]
    MeetingActionKind.CANCEL: _cancel,  # type: ignore[dict-item]
}


def _resolve_rule(meeting: Meeting, action: MeetingAction) -> MeetingTransitionRule:
    if meeting.is_terminal:
        raise AlreadyTerminalError(ENTITY_TYPE, meeting.id, meeting.state)

    rule = MEETING_TRANSITIONS.get((meeting.state, action.kind))
    if rule is None:
        raise InvalidTransitionError(meeting.state, action.kind.value, action.actor_role)

    if rule.party not in actor_parties(meeting, action.actor):
        raise NotAuthorizedError(action.actor_id, action.actor_role, rule.party.describe())
    return rule


def decide_meeting_transition(
    meeting: Meeting,
    action: MeetingAction,
    *,
    now: datetime,
    config: DefenseWorkflowConfig = DEFAULT_DEFENSE_WORKFLOW_CONFIG,
) -> MeetingTransitionResult:
    """Decide the outcome of `action` on `meeting`.

    Either the whole transition (new snapshot, changed fields, side
    effects) is returned, or an error is raised and nothing applies.

    Args:
        meeting: Current meeting snapshot.
        action: The action to apply.
        now: Timestamp for `updated_at`.
        config: Workflow policies (scoring range, etc.).

    Returns:
        The transition result. An identical availability resubmission
        returns the unchanged meeting with no side effects.

    Raises:
        AlreadyTerminalError: Meeting is COMPLETED or CANCELED.
        InvalidTransitionError: Action not allowed in the current state.
        NotAuthorizedError: Actor is not the party the action requires.
        ValidationError: Payload violates a constraint.
        InvalidTimeSlotError: Selected slot is not in the intersection.
        AlreadyScoredError: Jury member already scored.
    """
    rule = _resolve_rule(meeting, action)
    ctx = _Context(meeting=meeting, rule=rule, now=now, config=config)
    updated, notifications = _HANDLERS[action.kind](ctx, action)

    updated_fields = changed_fields(meeting, updated)
    if not updated_fields:
        return TransitionResult(
            previous_state=meeting.state,
            new_state=meeting.state,
            entity=meeting,
        )

    effects: list[SideEffect] = [PersistMeeting(updated, expected_version=meeting.version)]
    effects.extend(notifications)
    return TransitionResult(
        previous_state=meeting.state,
        new_state=updated.state,
        entity=updated,
        updated_fields=updated_fields,
        side_effects=tuple(effects),
    )


def available_meeting_actions(meeting: Meeting, actor: Actor) -> tuple[MeetingActionKind, ...]:
    """Action kinds `actor` may currently invoke on `meeting`.

    Presentation uses this to decide which controls to render; a jury
    member who already scored is not offered scoring again.
    """
    if meeting.is_terminal:
        return ()
    parties = actor_parties(meeting, actor)
    available = []
    for kind in MeetingActionKind:
        rule = MEETING_TRANSITIONS.get((meeting.state, kind))
        if rule is None or rule.party not in parties:
            continue
        if kind is MeetingActionKind.SUBMIT_SCORE and actor.id in meeting.juries_scores:
            continue
        available.append(kind)
    return tuple(available)
