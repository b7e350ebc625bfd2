"""Authorization errors for role- and identity-gated actions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.domain.exceptions import DefenseWorkflowError

if TYPE_CHECKING:
    from src.domain.models.user import Role


class NotAuthorizedError(DefenseWorkflowError):
    """Raised when the actor is not the party an action requires.

    Examples: a professor who is not the assigned instructor approving a
    form, or a user outside the jury submitting a score.

    Attributes:
        actor_id: Identifier of the acting user.
        actor_role: Role of the acting user.
        required: Description of the party the action requires.
    """

    def __init__(self, actor_id: int, actor_role: Role, required: str) -> None:
        self.actor_id = actor_id
        self.actor_role = actor_role
        self.required = required
        super().__init__(
            f"User {actor_id} ({actor_role.value}) is not authorized: "
            f"action requires {required}"
        )
