"""Errors raised at the collaborator (port) boundary."""

from __future__ import annotations

from uuid import UUID

from src.domain.exceptions import DefenseWorkflowError


class CollaboratorError(DefenseWorkflowError):
    """Wraps a failure from an injected persistence or directory call.

    The core does not retry these; retry policy belongs to the caller.
    Entity state is left unchanged when this is raised.

    Attributes:
        operation: Name of the collaborator call that failed.
        cause: The original exception.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(
            f"Collaborator call '{operation}' failed: {type(cause).__name__}: {cause}"
        )


class FormNotFoundError(DefenseWorkflowError):
    """Raised when a thesis form id does not resolve."""

    def __init__(self, form_id: UUID) -> None:
        self.form_id = form_id
        super().__init__(f"Thesis form not found: {form_id}")


class MeetingNotFoundError(DefenseWorkflowError):
    """Raised when a meeting id (or the meeting of a form) does not resolve."""

    def __init__(self, meeting_id: UUID | None = None, form_id: UUID | None = None) -> None:
        self.meeting_id = meeting_id
        self.form_id = form_id
        if meeting_id is not None:
            message = f"Meeting not found: {meeting_id}"
        else:
            message = f"No meeting exists for thesis form {form_id}"
        super().__init__(message)
