"""Defense meeting service - orchestrates availability, scheduling, and scoring.

Workflow Constraints:
- Decisions come from the pure meeting state machine
- Writes use optimistic CAS on the meeting version
- An identical availability resubmission writes nothing
- Collaborator failures surface as CollaboratorError with state unchanged
"""

from __future__ import annotations

from uuid import UUID

from structlog import get_logger

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.workflow_notifier import WorkflowNotifierProtocol
from src.application.services.collaborator_guard import deliver_notice, guarded
from src.config.defense_config import (
    DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    DefenseWorkflowConfig,
)
from src.domain.errors import MeetingNotFoundError
from src.domain.exceptions import DefenseWorkflowError
from src.domain.models.actions import MeetingAction
from src.domain.models.meeting import Meeting
from src.domain.models.transition import (
    MeetingTransitionResult,
    NotifyParticipants,
    PersistMeeting,
)
from src.domain.models.user import Actor
from src.domain.services.availability_aggregator import (
    AvailabilityReport,
    build_availability_report,
)
from src.domain.services.meeting_state_machine import (
    available_meeting_actions,
    decide_meeting_transition,
)
from src.domain.services.scoring_aggregator import ScoringProgress, scoring_progress

logger = get_logger(__name__)


class MeetingService:
    """Service for the defense meeting lifecycle.

    Example:
        >>> service = MeetingService(meeting_repo, notifier, time_authority)
        >>> await service.transition(
        ...     meeting_id,
        ...     SubmitAvailability(actor=jury_member, time_slots=(slot,)),
        ... )
        >>> report = await service.availability_report(meeting_id)
    """

    def __init__(
        self,
        meeting_repo: MeetingRepositoryProtocol,
        notifier: WorkflowNotifierProtocol,
        time_authority: TimeAuthorityProtocol,
        config: DefenseWorkflowConfig = DEFAULT_DEFENSE_WORKFLOW_CONFIG,
    ) -> None:
        self._meetings = meeting_repo
        self._notifier = notifier
        self._time = time_authority
        self._config = config

    async def transition(self, meeting_id: UUID, action: MeetingAction) -> MeetingTransitionResult:
        """Apply an action to a stored meeting.

        Args:
            meeting_id: The meeting to act on.
            action: The action, carrying its actor.

        Returns:
            The transition result, after all its side effects ran.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            AlreadyTerminalError: If the meeting is completed or canceled.
            InvalidTransitionError: If the action is not allowed now.
            NotAuthorizedError: If the actor may not take the action.
            ValidationError: If the payload is invalid.
            InvalidTimeSlotError: If the chosen slot is not common to the jury.
            AlreadyScoredError: If the jury member already scored.
            ConcurrentModificationError: If the meeting changed meanwhile.
            CollaboratorError: If a collaborator fails.
        """
        log = logger.bind(
            meeting_id=str(meeting_id),
            action=action.kind.value,
            actor_id=action.actor_id,
            actor_role=action.actor_role.value,
        )
        meeting = await self.get_meeting(meeting_id)

        try:
            result = decide_meeting_transition(
                meeting,
                action,
                now=self._time.now(),
                config=self._config,
            )
        except DefenseWorkflowError as exc:
            log.warning(
                "meeting_action_rejected",
                state=meeting.state.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        if not result.changed:
            log.debug("meeting_action_noop", state=meeting.state.value)
            return result

        for effect in result.effects_of_type(PersistMeeting):
            await guarded(
                "meeting_repo.save",
                self._meetings.save(effect.meeting, effect.expected_version),  # type: ignore[union-attr]
            )
        for notice in result.effects_of_type(NotifyParticipants):
            await deliver_notice(self._notifier, notice)  # type: ignore[arg-type]

        log.info(
            "meeting_transitioned",
            previous_state=result.previous_state.value,
            new_state=result.new_state.value,
            updated_fields=sorted(result.updated_fields),
        )
        return result

    async def get_meeting(self, meeting_id: UUID) -> Meeting:
        """Load a meeting.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            CollaboratorError: If the repository fails.
        """
        meeting = await guarded("meeting_repo.get", self._meetings.get(meeting_id))
        if meeting is None:
            raise MeetingNotFoundError(meeting_id=meeting_id)
        return meeting

    async def get_meeting_for_form(self, form_id: UUID) -> Meeting:
        """Load the meeting spawned by a thesis form.

        Raises:
            MeetingNotFoundError: If the form has no meeting yet.
            CollaboratorError: If the repository fails.
        """
        meeting = await guarded("meeting_repo.get_by_form_id", self._meetings.get_by_form_id(form_id))
        if meeting is None:
            raise MeetingNotFoundError(form_id=form_id)
        return meeting

    async def list_meetings_for(self, user_id: int) -> list[Meeting]:
        """Meetings where `user_id` is the student or a jury member."""
        return await guarded(
            "meeting_repo.list_for_participant",
            self._meetings.list_for_participant(user_id),
        )

    async def availability_report(self, meeting_id: UUID) -> AvailabilityReport:
        """Per-member availability and the current jury intersection."""
        return build_availability_report(await self.get_meeting(meeting_id))

    async def scoring_progress(self, meeting_id: UUID) -> ScoringProgress:
        """Scored count, pending jury members, and the final score once known."""
        return scoring_progress(await self.get_meeting(meeting_id))

    async def available_actions(self, meeting_id: UUID, actor: Actor) -> list[str]:
        """Names of the actions `actor` may take on the meeting right now."""
        meeting = await self.get_meeting(meeting_id)
        return [kind.value for kind in available_meeting_actions(meeting, actor)]
