"""Thesis form review state machine.

Pure decision logic for the form lifecycle. Reviews run Instructor ->
Admin -> Manager; each reviewer may approve, reject, or send the form back
to an earlier party for revision. The manager's approval assigns the jury
and spawns the defense meeting.

The whole policy lives in FORM_TRANSITIONS, keyed by (state, action kind).
Each rule names the party allowed to act and where the form goes, so
adding a state or a role is a table edit rather than a new branch.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from uuid import UUID, uuid4

from src.config.defense_config import (
    DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    DefenseWorkflowConfig,
    FormContentPolicy,
)
from src.domain.errors.authorization import NotAuthorizedError
from src.domain.errors.state_transition import (
    AlreadyTerminalError,
    InvalidTransitionError,
)
from src.domain.errors.validation import ValidationError
from src.domain.models.actions import (
    ApproveForm,
    EditFormContent,
    FormAction,
    FormActionKind,
    RejectForm,
    RequestRevision,
    SubmitRevision,
)
from src.domain.models.thesis_form import (
    STUDENT_EDITABLE_STATES,
    FormState,
    RevisionTarget,
    ThesisForm,
)
from src.domain.models.transition import (
    CreateMeeting,
    FormTransitionResult,
    NotificationEvent,
    NotifyParticipants,
    PersistForm,
    SideEffect,
    TransitionResult,
    changed_fields,
)
from src.domain.models.user import Actor, Role, SimpleUser
from src.domain.services.meeting_state_machine import create_meeting

ENTITY_TYPE = "thesis_form"


class FormParty(Enum):
    """Parties that act on a thesis form."""

    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"

    def describe(self) -> str:
        return _PARTY_DESCRIPTIONS[self]


_PARTY_DESCRIPTIONS: dict[FormParty, str] = {
    FormParty.STUDENT: "the student who owns the form",
    FormParty.INSTRUCTOR: "the form's assigned instructor",
    FormParty.ADMIN: "an admin",
    FormParty.MANAGER: "a manager",
}

# Review timestamp stamped when a reviewing party acts
_REVIEWED_AT_FIELD: dict[FormParty, str] = {
    FormParty.INSTRUCTOR: "instructor_reviewed_at",
    FormParty.ADMIN: "admin_reviewed_at",
    FormParty.MANAGER: "manager_reviewed_at",
}

_TARGET_PARTY: dict[RevisionTarget, FormParty] = {
    RevisionTarget.STUDENT: FormParty.STUDENT,
    RevisionTarget.INSTRUCTOR: FormParty.INSTRUCTOR,
    RevisionTarget.ADMIN: FormParty.ADMIN,
}


@dataclass(frozen=True)
class FormTransitionRule:
    """One cell of the form transition table.

    Attributes:
        party: The only party allowed to take the action.
        to_state: Resulting state (None for revision requests).
        revision_targets: For revision requests, allowed target -> state.
        creates_meeting: Whether the transition spawns the defense meeting.
    """

    party: FormParty
    to_state: FormState | None = None
    revision_targets: Mapping[RevisionTarget, FormState] = field(
        default_factory=lambda: MappingProxyType({})
    )
    creates_meeting: bool = False


def _revision(party: FormParty, targets: dict[RevisionTarget, FormState]) -> FormTransitionRule:
    return FormTransitionRule(party=party, revision_targets=MappingProxyType(targets))


_S = FormState
_A = FormActionKind

FORM_TRANSITIONS: dict[tuple[FormState, FormActionKind], FormTransitionRule] = {
    # Instructor review
    (_S.SUBMITTED, _A.APPROVE): FormTransitionRule(FormParty.INSTRUCTOR, _S.INSTRUCTOR_APPROVED),
    (_S.SUBMITTED, _A.REJECT): FormTransitionRule(FormParty.INSTRUCTOR, _S.INSTRUCTOR_REJECTED),
    (_S.SUBMITTED, _A.REQUEST_REVISION): _revision(
        FormParty.INSTRUCTOR,
        {RevisionTarget.STUDENT: _S.INSTRUCTOR_REVISION_REQUESTED},
    ),
    # Waiting on the student; the instructor may still reject or re-forward
    (_S.INSTRUCTOR_REVISION_REQUESTED, _A.REJECT): FormTransitionRule(
        FormParty.INSTRUCTOR, _S.INSTRUCTOR_REJECTED
    ),
    (_S.INSTRUCTOR_REVISION_REQUESTED, _A.REQUEST_REVISION): _revision(
        FormParty.INSTRUCTOR,
        {RevisionTarget.STUDENT: _S.INSTRUCTOR_REVISION_REQUESTED},
    ),
    (_S.INSTRUCTOR_REVISION_REQUESTED, _A.SUBMIT_REVISION): FormTransitionRule(
        FormParty.STUDENT, _S.SUBMITTED
    ),
    # Admin review
    (_S.INSTRUCTOR_APPROVED, _A.APPROVE): FormTransitionRule(FormParty.ADMIN, _S.ADMIN_APPROVED),
    (_S.INSTRUCTOR_APPROVED, _A.REJECT): FormTransitionRule(FormParty.ADMIN, _S.ADMIN_REJECTED),
    (_S.INSTRUCTOR_APPROVED, _A.REQUEST_REVISION): _revision(
        FormParty.ADMIN,
        {
            RevisionTarget.STUDENT: _S.ADMIN_REVISION_REQUESTED_FOR_STUDENT,
            RevisionTarget.INSTRUCTOR: _S.ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR,
        },
    ),
    (_S.ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR, _A.SUBMIT_REVISION): FormTransitionRule(
        FormParty.INSTRUCTOR, _S.INSTRUCTOR_APPROVED
    ),
    (_S.ADMIN_REVISION_REQUESTED_FOR_STUDENT, _A.SUBMIT_REVISION): FormTransitionRule(
        FormParty.STUDENT, _S.INSTRUCTOR_APPROVED
    ),
    # Manager review
    (_S.ADMIN_APPROVED, _A.APPROVE): FormTransitionRule(
        FormParty.MANAGER, _S.MANAGER_APPROVED, creates_meeting=True
    ),
    (_S.ADMIN_APPROVED, _A.REJECT): FormTransitionRule(FormParty.MANAGER, _S.MANAGER_REJECTED),
    (_S.ADMIN_APPROVED, _A.REQUEST_REVISION): _revision(
        FormParty.MANAGER,
        {
            RevisionTarget.STUDENT: _S.MANAGER_REVISION_REQUESTED_FOR_STUDENT,
            RevisionTarget.INSTRUCTOR: _S.MANAGER_REVISION_REQUESTED_FOR_INSTRUCTOR,
            RevisionTarget.ADMIN: _S.MANAGER_REVISION_REQUESTED_FOR_ADMIN,
        },
    ),
    (_S.MANAGER_REVISION_REQUESTED_FOR_ADMIN, _A.SUBMIT_REVISION): FormTransitionRule(
        FormParty.ADMIN, _S.ADMIN_APPROVED
    ),
    (_S.MANAGER_REVISION_REQUESTED_FOR_INSTRUCTOR, _A.SUBMIT_REVISION): FormTransitionRule(
        FormParty.INSTRUCTOR, _S.INSTRUCTOR_APPROVED
    ),
    (_S.MANAGER_REVISION_REQUESTED_FOR_STUDENT, _A.SUBMIT_REVISION): FormTransitionRule(
        FormParty.STUDENT, _S.SUBMITTED
    ),
    # Content edits keep the state; the student resubmits explicitly
    **{
        (state, _A.EDIT_CONTENT): FormTransitionRule(FormParty.STUDENT, state)
        for state in STUDENT_EDITABLE_STATES
    },
}


def actor_parties(form: ThesisForm, actor: Actor) -> frozenset[FormParty]:
    """Resolve which form parties `actor` can act as.

    A manager who is also the form's instructor holds both parties.
    """
    parties: set[FormParty] = set()
    if actor.role is Role.STUDENT and actor.id == form.student_id:
        parties.add(FormParty.STUDENT)
    if actor.role.is_professor() and actor.id == form.instructor_id:
        parties.add(FormParty.INSTRUCTOR)
    if actor.role is Role.ADMIN:
        parties.add(FormParty.ADMIN)
    if actor.role is Role.MANAGER:
        parties.add(FormParty.MANAGER)
    return frozenset(parties)


def awaiting_party(state: FormState) -> FormParty | None:
    """The party whose action moves the form forward, or None if terminal."""
    if state.is_terminal():
        return None
    target = state.revision_target()
    if target is not None:
        return _TARGET_PARTY[target]
    return FORM_TRANSITIONS[(state, FormActionKind.APPROVE)].party


def _require_text(field_name: str, value: str, min_length: int, max_length: int | None = None) -> str:
    text = (value or "").strip()
    if len(text) < min_length:
        raise ValidationError(field_name, f"must be at least {min_length} characters")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(field_name, f"must be at most {max_length} characters")
    return text


def validate_content(title: str, abstract_text: str, policy: FormContentPolicy) -> tuple[str, str]:
    """Check title and abstract bounds; returns both trimmed."""
    return (
        _require_text("title", title, policy.min_title_length, policy.max_title_length),
        _require_text(
            "abstract_text",
            abstract_text,
            policy.min_abstract_length,
            policy.max_abstract_length,
        ),
    )


def _recipients_for(form: ThesisForm, party: FormParty) -> tuple[tuple[int, ...], tuple[Role, ...]]:
    """Individual recipients and recipient roles addressing `party` of `form`."""
    if party is FormParty.STUDENT:
        return (form.student_id,), ()
    if party is FormParty.INSTRUCTOR:
        return (form.instructor_id,), ()
    return (), (Role.ADMIN if party is FormParty.ADMIN else Role.MANAGER,)


def _notify(
    form: ThesisForm,
    party: FormParty,
    event: NotificationEvent,
    detail: str | None = None,
) -> NotifyParticipants:
    recipient_ids, recipient_roles = _recipients_for(form, party)
    return NotifyParticipants(
        event=event,
        entity_id=form.id,
        recipient_ids=recipient_ids,
        recipient_roles=recipient_roles,
        detail=detail,
    )


def create_thesis_form(
    actor: Actor,
    *,
    title: str,
    abstract_text: str,
    instructor_id: int,
    field_id: int,
    now: datetime,
    suggested_jury_ids: tuple[int, ...] = (),
    form_id: UUID | None = None,
    policy: FormContentPolicy | None = None,
) -> FormTransitionResult:
    """Create a new thesis form in SUBMITTED for the acting student.

    Creation reports SUBMITTED as both the previous and the new state.

    Raises:
        NotAuthorizedError: Actor is not a student.
        ValidationError: Title or abstract out of bounds.
    """
    if actor.role is not Role.STUDENT:
        raise NotAuthorizedError(actor.id, actor.role, "a student")
    policy = policy or DEFAULT_DEFENSE_WORKFLOW_CONFIG.content
    clean_title, clean_abstract = validate_content(title, abstract_text, policy)

    form = ThesisForm(
        id=form_id or uuid4(),
        title=clean_title,
        abstract_text=clean_abstract,
        student_id=actor.id,
        instructor_id=instructor_id,
        field_id=field_id,
        state=FormState.SUBMITTED,
        created_at=now,
        submitted_at=now,
        updated_at=now,
        suggested_jury_ids=tuple(suggested_jury_ids),
    )
    return TransitionResult(
        previous_state=FormState.SUBMITTED,
        new_state=FormState.SUBMITTED,
        entity=form,
        updated_fields=frozenset(f.name for f in fields(ThesisForm) if f.name != "version"),
        side_effects=(
            PersistForm(form, expected_version=None),
            _notify(form, FormParty.INSTRUCTOR, NotificationEvent.FORM_SUBMITTED),
        ),
    )


@dataclass(frozen=True)
class _Context:
    form: ThesisForm
    rule: FormTransitionRule
    now: datetime
    config: DefenseWorkflowConfig
    jury_roster: Mapping[int, SimpleUser] | None
    meeting_id: UUID | None

    def reviewed(self) -> dict[str, datetime]:
        """Review timestamp update for the acting party, if it reviews."""
        name = _REVIEWED_AT_FIELD.get(self.rule.party)
        return {name: self.now} if name else {}


_Outcome = tuple[ThesisForm, list[SideEffect]]


def _approve(ctx: _Context, action: ApproveForm) -> _Outcome:
    form, rule = ctx.form, ctx.rule
    if not rule.creates_meeting:
        if action.jury_ids:
            raise ValidationError("jury_ids", "only the manager's approval assigns a jury")
        updated = form.evolve(state=rule.to_state, updated_at=ctx.now, **ctx.reviewed())
        next_party = awaiting_party(rule.to_state)
        effects: list[SideEffect] = [
            _notify(form, FormParty.STUDENT, NotificationEvent.FORM_APPROVED)
        ]
        if next_party is not None:
            effects.append(_notify(form, next_party, NotificationEvent.FORM_SUBMITTED))
        return updated, effects

    # Jury validation happens before the form changes
    meeting = create_meeting(
        form,
        tuple(action.jury_ids),
        ctx.jury_roster,
        policy=ctx.config.jury,
        now=ctx.now,
        meeting_id=ctx.meeting_id,
    )
    updated = form.evolve(state=rule.to_state, updated_at=ctx.now, **ctx.reviewed())
    return updated, [
        CreateMeeting(meeting),
        _notify(form, FormParty.STUDENT, NotificationEvent.FORM_APPROVED),
        NotifyParticipants(
            event=NotificationEvent.MEETING_CREATED,
            entity_id=meeting.id,
            recipient_ids=(form.student_id, *meeting.jury_ids),
        ),
    ]


def _reject(ctx: _Context, action: RejectForm) -> _Outcome:
    form, rule = ctx.form, ctx.rule
    reason = _require_text("reason", action.reason, ctx.config.content.min_reason_length)
    updated = form.evolve(
        state=rule.to_state,
        rejection_reason=reason,
        revision_message=None,
        updated_at=ctx.now,
        **ctx.reviewed(),
    )
    return updated, [
        _notify(form, FormParty.STUDENT, NotificationEvent.FORM_REJECTED, reason)
    ]


def _request_revision(ctx: _Context, action: RequestRevision) -> _Outcome:
    form, rule = ctx.form, ctx.rule
    message = _require_text("message", action.message, ctx.config.content.min_reason_length)
    new_state = rule.revision_targets.get(action.target)
    if new_state is None:
        allowed = ", ".join(target.value for target in rule.revision_targets)
        raise InvalidTransitionError(
            form.state,
            action.kind.value,
            action.actor_role,
            reason=f"revision target {action.target.value} not allowed (allowed: {allowed})",
        )
    updated = form.evolve(
        state=new_state,
        revision_message=message,
        revision_requested_at=ctx.now,
        updated_at=ctx.now,
        **ctx.reviewed(),
    )
    return updated, [
        _notify(
            form,
            _TARGET_PARTY[action.target],
            NotificationEvent.FORM_REVISION_REQUESTED,
            message,
        )
    ]


def _submit_revision(ctx: _Context, action: SubmitRevision) -> _Outcome:
    form, rule = ctx.form, ctx.rule
    changes: dict[str, object] = {
        "state": rule.to_state,
        "revision_message": None,
        "updated_at": ctx.now,
    }
    if rule.to_state is FormState.SUBMITTED:
        changes["submitted_at"] = ctx.now
    updated = form.evolve(**changes)

    effects: list[SideEffect] = []
    next_party = awaiting_party(rule.to_state)
    if next_party is not None:
        effects.append(_notify(form, next_party, NotificationEvent.FORM_REVISION_SUBMITTED))
    return updated, effects


def _edit_content(ctx: _Context, action: EditFormContent) -> _Outcome:
    form = ctx.form
    title, abstract_text = validate_content(action.title, action.abstract_text, ctx.config.content)
    if action.instructor_id <= 0:
        raise ValidationError("instructor_id", "an instructor is required")
    field_id = action.field_id if action.field_id is not None else form.field_id

    if (title, abstract_text, action.instructor_id, field_id) == (
        form.title,
        form.abstract_text,
        form.instructor_id,
        form.field_id,
    ):
        return form, []

    updated = form.evolve(
        title=title,
        abstract_text=abstract_text,
        instructor_id=action.instructor_id,
        field_id=field_id,
        updated_at=ctx.now,
    )
    return updated, []


_HANDLERS: dict[FormActionKind, Callable[[_Context, FormAction], _Outcome]] = {
    FormActionKind.APPROVE: _approve,  # type: ignore[dict-item]
    FormActionKind.REJECT: _reject,  # type: ignore[dict-item]
    FormActionKind.REQUEST_REVISION: _request_revision,  # type: ignore[dict-item]
    FormActionKind.SUBMIT_REVISION: _submit_revision,  # type: ignore[dict-item]
    FormActionKind.EDIT_CONTENT: _edit_content,  # type: ignore[dict-item]
}


def resolve_form_rule(form: ThesisForm, action: FormAction) -> FormTransitionRule:
    """Look up the rule for `action`, checking terminality and party.

    Raises:
        AlreadyTerminalError: Form is in a terminal state.
        InvalidTransitionError: (state, action) is not in the table.
        NotAuthorizedError: Actor is not the party the rule requires.
    """
    if form.is_terminal:
        raise AlreadyTerminalError(ENTITY_TYPE, form.id, form.state)

    rule = FORM_TRANSITIONS.get((form.state, action.kind))
    if rule is None:
        raise InvalidTransitionError(form.state, action.kind.value, action.actor_role)

    if rule.party not in actor_parties(form, action.actor):
        raise NotAuthorizedError(action.actor_id, action.actor_role, rule.party.describe())
    return rule


def decide_form_transition(
    form: ThesisForm,
    action: FormAction,
    *,
    now: datetime,
    config: DefenseWorkflowConfig = DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    jury_roster: Mapping[int, SimpleUser] | None = None,
    meeting_id: UUID | None = None,
) -> FormTransitionResult:
    """Decide the outcome of `action` on `form`.

    Either the whole transition (new snapshot, changed fields, side
    effects) is returned, or an error is raised and nothing applies.

    Args:
        form: Current form snapshot.
        action: The action to apply.
        now: Timestamp for review and update fields.
        config: Workflow policies.
        jury_roster: Professors by id, needed for the manager's approval.
        meeting_id: Identifier for a spawned meeting (generated if omitted).

    Returns:
        The transition result. The manager's approval carries a
        CreateMeeting side effect.

    Raises:
        AlreadyTerminalError: Form is in a terminal state.
        InvalidTransitionError: Action or revision target not allowed.
        NotAuthorizedError: Actor is not the party the action requires.
        ValidationError: Payload violates a constraint (form unchanged).
    """
    rule = resolve_form_rule(form, action)
    ctx = _Context(
        form=form,
        rule=rule,
        now=now,
        config=config,
        jury_roster=jury_roster,
        meeting_id=meeting_id,
    )
    updated, follow_ups = _HANDLERS[action.kind](ctx, action)

    # A decision that changes no field writes and notifies nothing
    updated_fields = changed_fields(form, updated)
    if not updated_fields:
        return TransitionResult(previous_state=form.state, new_state=form.state, entity=form)

    effects: list[SideEffect] = [PersistForm(updated, expected_version=form.version)]
    effects.extend(follow_ups)
    return TransitionResult(
        previous_state=form.state,
        new_state=updated.state,
        entity=updated,
        updated_fields=updated_fields,
        side_effects=tuple(effects),
    )


def available_form_actions(form: ThesisForm, actor: Actor) -> tuple[FormActionKind, ...]:
    """Action kinds `actor` may currently invoke on `form`."""
    if form.is_terminal:
        return ()
    parties = actor_parties(form, actor)
    return tuple(
        kind
        for kind in FormActionKind
        if (rule := FORM_TRANSITIONS.get((form.state, kind))) is not None
        and rule.party in parties
    )


def revision_targets_for(form: ThesisForm, actor: Actor) -> tuple[RevisionTarget, ...]:
    """Revision targets `actor` may choose for `form` right now."""
    if form.is_terminal:
        return ()
    rule = FORM_TRANSITIONS.get((form.state, FormActionKind.REQUEST_REVISION))
    if rule is None or rule.party not in actor_parties(form, actor):
        return ()
    return tuple(rule.revision_targets)
