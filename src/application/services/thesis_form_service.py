"""Thesis form service - orchestrates the form review workflow.

This module wires the pure form state machine to its collaborators:
the form and meeting repositories, the user directory, the notifier,
and the clock.

Workflow Constraints:
- The state machine decides; this service only reads inputs and carries
  out the side effects it is handed, in order
- Every write uses the version the decision was based on (optimistic CAS)
- The manager's approval writes the form AND creates the meeting; if the
  meeting write fails the form write is compensated
- Collaborator failures surface as CollaboratorError with state unchanged
- Notification delivery failures are logged, never undo a transition
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from structlog import get_logger

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.thesis_form_repository import ThesisFormRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.user_directory import UserDirectoryProtocol
from src.application.ports.workflow_notifier import WorkflowNotifierProtocol
from src.application.services.collaborator_guard import deliver_notice, guarded
from src.config.defense_config import (
    DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    DefenseWorkflowConfig,
)
from src.domain.errors import (
    FormNotFoundError,
    NotAuthorizedError,
    ValidationError,
)
from src.domain.exceptions import DefenseWorkflowError
from src.domain.models.actions import EditFormContent, FormAction
from src.domain.models.thesis_form import FormState, ThesisForm
from src.domain.models.transition import (
    CreateMeeting,
    FormTransitionResult,
    NotifyParticipants,
    PersistForm,
)
from src.domain.models.user import Actor, Role, SimpleUser
from src.domain.primitives import AtomicOperationContext
from src.domain.services.thesis_form_state_machine import (
    FormParty,
    awaiting_party,
    create_thesis_form,
    decide_form_transition,
    resolve_form_rule,
)

logger = get_logger(__name__)

_STATES_AWAITING: dict[FormParty, frozenset[FormState]] = {
    party: frozenset(state for state in FormState if awaiting_party(state) is party)
    for party in FormParty
}


class ThesisFormService:
    """Service for submitting and reviewing thesis forms.

    The service ensures:
    1. The form exists and the decision is made on its stored snapshot
    2. The instructor named on a form is a professor
    3. The professor roster is resolved only when a jury is assigned
    4. Side effects run in the order the state machine emitted them
    5. The form and its meeting are written together or not at all

    Example:
        >>> service = ThesisFormService(
        ...     form_repo=form_repo,
        ...     meeting_repo=meeting_repo,
        ...     user_directory=user_directory,
        ...     notifier=notifier,
        ...     time_authority=time_authority,
        ... )
        >>> form = await service.create_form(
        ...     student,
        ...     title="Graph neural networks for traffic",
        ...     abstract_text="...",
        ...     instructor_id=7,
        ...     field_id=2,
        ... )
        >>> await service.transition(form.id, ApproveForm(actor=instructor))
    """

    def __init__(
        self,
        form_repo: ThesisFormRepositoryProtocol,
        meeting_repo: MeetingRepositoryProtocol,
        user_directory: UserDirectoryProtocol,
        notifier: WorkflowNotifierProtocol,
        time_authority: TimeAuthorityProtocol,
        config: DefenseWorkflowConfig = DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    ) -> None:
        """Initialize the thesis form service.

        Args:
            form_repo: Repository for thesis forms.
            meeting_repo: Repository for defense meetings (manager approval).
            user_directory: Role and professor lookups.
            notifier: Receives participant notices.
            time_authority: Clock for all timestamps.
            config: Workflow policies.
        """
        self._forms = form_repo
        self._meetings = meeting_repo
        self._users = user_directory
        self._notifier = notifier
        self._time = time_authority
        self._config = config

    async def create_form(
        self,
        actor: Actor,
        *,
        title: str,
        abstract_text: str,
        instructor_id: int,
        field_id: int,
        suggested_jury_ids: tuple[int, ...] = (),
    ) -> ThesisForm:
        """Create and submit a new thesis form for the acting student.

        Args:
            actor: The submitting student.
            title: Thesis title.
            abstract_text: Thesis abstract.
            instructor_id: The professor asked to supervise.
            field_id: Field of study.
            suggested_jury_ids: Optional jury suggestion for the manager.

        Returns:
            The stored form in SUBMITTED.

        Raises:
            NotAuthorizedError: If the actor is not a student.
            ValidationError: If content is out of bounds or the instructor
                is not a professor.
            CollaboratorError: If the directory or repository fails.
        """
        log = logger.bind(actor_id=actor.id, instructor_id=instructor_id)
        await self._require_professor(instructor_id)

        try:
            result = create_thesis_form(
                actor,
                title=title,
                abstract_text=abstract_text,
                instructor_id=instructor_id,
                field_id=field_id,
                suggested_jury_ids=suggested_jury_ids,
                now=self._time.now(),
                policy=self._config.content,
            )
        except DefenseWorkflowError as exc:
            log.warning("form_creation_rejected", error_type=type(exc).__name__, error=str(exc))
            raise

        await self._apply(result)
        log.info("form_created", form_id=str(result.entity.id))
        return result.entity

    async def transition(self, form_id: UUID, action: FormAction) -> FormTransitionResult:
        """Apply a review action to a stored form.

        Args:
            form_id: The form to act on.
            action: The action, carrying its actor.

        Returns:
            The transition result, after all its side effects ran.

        Raises:
            FormNotFoundError: If the form does not exist.
            AlreadyTerminalError: If the form is already decided.
            InvalidTransitionError: If the action is not allowed now.
            NotAuthorizedError: If the actor may not take the action.
            ValidationError: If the payload is invalid.
            ConcurrentModificationError: If the form changed meanwhile.
            CollaboratorError: If a collaborator fails.
        """
        log = logger.bind(
            form_id=str(form_id),
            action=action.kind.value,
            actor_id=action.actor_id,
            actor_role=action.actor_role.value,
        )
        form = await self.get_form(form_id)

        try:
            rule = resolve_form_rule(form, action)
        except DefenseWorkflowError as exc:
            _log_rejection(log, form, exc)
            raise

        # Roster is read only after the actor passed authorization
        jury_roster: dict[int, SimpleUser] | None = None
        if rule.creates_meeting:
            professors = await guarded("user_directory.list_professors", self._users.list_professors())
            jury_roster = {professor.id: professor for professor in professors}

        try:
            result = decide_form_transition(
                form,
                action,
                now=self._time.now(),
                config=self._config,
                jury_roster=jury_roster,
            )
        except DefenseWorkflowError as exc:
            _log_rejection(log, form, exc)
            raise

        if isinstance(action, EditFormContent) and "instructor_id" in result.updated_fields:
            await self._require_professor(action.instructor_id)

        if not result.changed:
            log.debug("form_action_noop", state=form.state.value)
            return result

        await self._apply(result, original=form)
        log.info(
            "form_transitioned",
            previous_state=result.previous_state.value,
            new_state=result.new_state.value,
            updated_fields=sorted(result.updated_fields),
        )
        return result

    async def get_form(self, form_id: UUID) -> ThesisForm:
        """Load a form.

        Raises:
            FormNotFoundError: If the form does not exist.
            CollaboratorError: If the repository fails.
        """
        form = await guarded("form_repo.get", self._forms.get(form_id))
        if form is None:
            raise FormNotFoundError(form_id)
        return form

    async def list_forms_awaiting(self, actor: Actor, limit: int = 100) -> list[ThesisForm]:
        """List the forms currently waiting on `actor`, newest first.

        Students see their own forms sent back for revision; professors see
        forms waiting on them as instructor; admins and managers see their
        review queues (a manager also sees forms they supervise).
        """
        found: dict[UUID, ThesisForm] = {}

        if actor.role is Role.STUDENT:
            own = await guarded("form_repo.list_by_student", self._forms.list_by_student(actor.id))
            for form in own:
                if form.state in _STATES_AWAITING[FormParty.STUDENT]:
                    found[form.id] = form

        if actor.role.is_professor():
            supervised, _ = await guarded(
                "form_repo.list_by_states",
                self._forms.list_by_states(
                    _STATES_AWAITING[FormParty.INSTRUCTOR],
                    instructor_id=actor.id,
                    limit=limit,
                ),
            )
            found.update((form.id, form) for form in supervised)

        queue_party = {Role.ADMIN: FormParty.ADMIN, Role.MANAGER: FormParty.MANAGER}.get(actor.role)
        if queue_party is not None:
            queued, _ = await guarded(
                "form_repo.list_by_states",
                self._forms.list_by_states(_STATES_AWAITING[queue_party], limit=limit),
            )
            found.update((form.id, form) for form in queued)

        forms = sorted(found.values(), key=lambda form: form.updated_at, reverse=True)
        return forms[:limit]

    async def delete_form(self, actor: Actor, form_id: UUID) -> None:
        """Delete a form (admins only), together with its meeting if it has one.

        Both deletions happen or neither: if the form delete fails, the
        meeting is restored.

        Raises:
            NotAuthorizedError: If the actor is not an admin.
            FormNotFoundError: If the form does not exist.
            CollaboratorError: If a repository fails.
        """
        if actor.role is not Role.ADMIN:
            raise NotAuthorizedError(actor.id, actor.role, "an admin")
        await self.get_form(form_id)
        meeting = await guarded("meeting_repo.get_by_form_id", self._meetings.get_by_form_id(form_id))

        async with AtomicOperationContext("form_deletion") as ctx:
            if meeting is not None:
                await guarded("meeting_repo.delete", self._meetings.delete(meeting.id))
                ctx.add_rollback(lambda: self._meetings.save(meeting, expected_version=None))
            await guarded("form_repo.delete", self._forms.delete(form_id))

        logger.info(
            "form_deleted",
            form_id=str(form_id),
            actor_id=actor.id,
            meeting_id=str(meeting.id) if meeting is not None else None,
        )

    async def _require_professor(self, user_id: int) -> None:
        role = await guarded("user_directory.get_role", self._users.get_role(user_id))
        if role is None or not role.is_professor():
            raise ValidationError("instructor_id", f"user {user_id} is not a professor")

    async def _apply(self, result: FormTransitionResult, original: ThesisForm | None = None) -> None:
        """Carry out the side effects of an accepted transition."""
        creates = result.effects_of_type(CreateMeeting)
        if creates:
            await self._persist_with_meeting(result, original, creates[0])  # type: ignore[arg-type]
        else:
            for effect in result.effects_of_type(PersistForm):
                await guarded(
                    "form_repo.save",
                    self._forms.save(effect.form, effect.expected_version),  # type: ignore[union-attr]
                )

        for notice in result.effects_of_type(NotifyParticipants):
            await deliver_notice(self._notifier, notice)  # type: ignore[arg-type]

    async def _persist_with_meeting(
        self,
        result: FormTransitionResult,
        original: ThesisForm | None,
        create: CreateMeeting,
    ) -> None:
        persist = result.effects_of_type(PersistForm)[0]
        updated_form = persist.form  # type: ignore[union-attr]
        async with AtomicOperationContext("manager_approval") as ctx:
            await guarded(
                "form_repo.save",
                self._forms.save(updated_form, persist.expected_version),  # type: ignore[union-attr]
            )
            if original is not None:
                ctx.add_rollback(
                    lambda: self._forms.save(original, expected_version=updated_form.version)
                )
            await guarded("meeting_repo.save", self._meetings.save(create.meeting, None))
        logger.info(
            "meeting_created",
            form_id=str(updated_form.id),
            meeting_id=str(create.meeting.id),
            jury_ids=list(create.meeting.jury_ids),
        )


def _log_rejection(log: Any, form: ThesisForm, exc: DefenseWorkflowError) -> None:
    log.warning(
        "form_action_rejected",
        state=form.state.value,
        error_type=type(exc).__name__,
        error=str(exc),
    )
