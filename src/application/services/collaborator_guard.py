"""Boundary wrapper for calls into injected collaborators.

Repositories, the user directory, and the notifier are external systems.
Whatever they raise that is not a workflow error is wrapped in
CollaboratorError so callers see one failure type per boundary.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from structlog import get_logger

from src.application.ports.workflow_notifier import WorkflowNotifierProtocol
from src.domain.errors.collaborator import CollaboratorError
from src.domain.exceptions import DefenseWorkflowError
from src.domain.models.transition import NotifyParticipants

logger = get_logger(__name__)

T = TypeVar("T")


async def guarded(operation: str, call: Awaitable[T]) -> T:
    """Await `call`, wrapping non-workflow exceptions.

    Args:
        operation: Name of the collaborator call, e.g. "form_repo.save".
        call: The awaitable returned by the collaborator.

    Returns:
        Whatever the collaborator returned.

    Raises:
        DefenseWorkflowError: Re-raised unchanged (e.g. a version conflict).
        CollaboratorError: For any other exception.
    """
    try:
        return await call
    except DefenseWorkflowError:
        raise
    except Exception as exc:
        raise CollaboratorError(operation, exc) from exc


async def deliver_notice(notifier: WorkflowNotifierProtocol, notice: NotifyParticipants) -> bool:
    """Hand `notice` to the notifier; a delivery failure is logged, not raised.

    The transition behind the notice is already persisted, so delivery
    can be retried later without undoing it.

    Returns:
        True if the notifier accepted the notice.
    """
    try:
        await guarded("notifier.notify", notifier.notify(notice))
    except CollaboratorError as exc:
        logger.error(
            "notification_failed",
            notification_event=notice.event.value,
            entity_id=str(notice.entity_id),
            error=str(exc.cause),
            error_type=type(exc.cause).__name__,
        )
        return False
    return True
