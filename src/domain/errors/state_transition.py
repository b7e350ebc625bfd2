"""State transition errors for the form and meeting state machines.

This module defines errors raised when an action does not fit the
transition table of the entity it targets.

Both the thesis form machine and the meeting machine raise these, so
the state type is any workflow state enum.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from src.domain.exceptions import DefenseWorkflowError

if TYPE_CHECKING:
    from src.domain.models.user import Role


class InvalidTransitionError(DefenseWorkflowError):
    """Raised when an action is not permitted from the current state.

    The (state, action) pair is absent from the transition table, or the
    action payload names a destination the table does not allow (for
    example a revision target outside the allowed set).

    Attributes:
        current_state: State of the entity when the action was attempted.
        action: Action kind that was attempted.
        actor_role: Role of the actor who attempted it.
        reason: Optional detail, e.g. the rejected revision target.
    """

    def __init__(
        self,
        current_state: Enum,
        action: str,
        actor_role: Role,
        reason: str | None = None,
    ) -> None:
        """Initialize invalid transition error.

        Args:
            current_state: Current entity state.
            action: Attempted action kind.
            actor_role: Role of the acting user.
            reason: Optional extra detail.
        """
        self.current_state = current_state
        self.action = action
        self.actor_role = actor_role
        self.reason = reason

        message = (
            f"Invalid transition: cannot '{action}' from state "
            f"{current_state.value} as {actor_role.value}"
        )
        if reason:
            message += f": {reason}"
        super().__init__(message)


class AlreadyTerminalError(DefenseWorkflowError):
    """Raised when an action targets an entity in a terminal state.

    Rejected or fully approved forms, and completed or canceled meetings,
    accept no further transitions. This is distinguishable from
    InvalidTransitionError so callers can explain that the workflow is over.

    Attributes:
        entity_type: "thesis_form" or "meeting".
        entity_id: Identifier of the entity.
        state: The terminal state the entity is in.
    """

    def __init__(self, entity_type: str, entity_id: object, state: Enum) -> None:
        """Initialize already terminal error.

        Args:
            entity_type: Kind of entity ("thesis_form" or "meeting").
            entity_id: Identifier of the entity.
            state: The terminal state.
        """
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.state = state
        super().__init__(
            f"{entity_type} {entity_id} is in terminal state {state.value}. "
            "Terminal states cannot be modified."
        )
