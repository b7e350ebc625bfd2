"""Thesis form domain model.

This module defines the thesis form a student submits for review, the
13-state review lifecycle, and the revision targets reviewers can send a
form back to.

State Machine (see src/domain/services/thesis_form_state_machine.py):
    SUBMITTED -> INSTRUCTOR_APPROVED -> ADMIN_APPROVED -> MANAGER_APPROVED
    with revision loops back to the student, instructor, or admin and a
    rejection exit at each review tier.

Terminal States:
    INSTRUCTOR_REJECTED, ADMIN_REJECTED, MANAGER_REJECTED, MANAGER_APPROVED.
    MANAGER_APPROVED is terminal for the form; it spawns the defense meeting.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID


class RevisionTarget(Enum):
    """Party a revision request is directed to."""

    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"
    ADMIN = "ADMIN"


class FormState(Enum):
    """State in the thesis form review lifecycle.

    String spellings are a contract with persistence and must not change.
    """

    SUBMITTED = "SUBMITTED"
    INSTRUCTOR_APPROVED = "INSTRUCTOR_APPROVED"
    INSTRUCTOR_REJECTED = "INSTRUCTOR_REJECTED"
    INSTRUCTOR_REVISION_REQUESTED = "INSTRUCTOR_REVISION_REQUESTED"
    ADMIN_APPROVED = "ADMIN_APPROVED"
    ADMIN_REJECTED = "ADMIN_REJECTED"
    ADMIN_REVISION_REQUESTED_FOR_STUDENT = "ADMIN_REVISION_REQUESTED_FOR_STUDENT"
    ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR = "ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR"
    MANAGER_APPROVED = "MANAGER_APPROVED"
    MANAGER_REJECTED = "MANAGER_REJECTED"
    MANAGER_REVISION_REQUESTED_FOR_STUDENT = "MANAGER_REVISION_REQUESTED_FOR_STUDENT"
    MANAGER_REVISION_REQUESTED_FOR_INSTRUCTOR = "MANAGER_REVISION_REQUESTED_FOR_INSTRUCTOR"
    MANAGER_REVISION_REQUESTED_FOR_ADMIN = "MANAGER_REVISION_REQUESTED_FOR_ADMIN"

    def is_terminal(self) -> bool:
        """Check if this state accepts no further transitions."""
        return self in FORM_TERMINAL_STATES

    def is_rejected(self) -> bool:
        return self in FORM_REJECTED_STATES

    def is_revision_requested(self) -> bool:
        """Check if the form is waiting on a revision."""
        return self in REVISION_REQUESTED_STATES

    def revision_target(self) -> RevisionTarget | None:
        """Get the party that must submit a revision, if any."""
        return REVISION_REQUESTED_STATES.get(self)


FORM_REJECTED_STATES: frozenset[FormState] = frozenset(
    {
        FormState.INSTRUCTOR_REJECTED,
        FormState.ADMIN_REJECTED,
        FormState.MANAGER_REJECTED,
    }
)

FORM_TERMINAL_STATES: frozenset[FormState] = FORM_REJECTED_STATES | {
    FormState.MANAGER_APPROVED
}

# Revision-requested states mapped to the party that resumes the form
REVISION_REQUESTED_STATES: dict[FormState, RevisionTarget] = {
    FormState.INSTRUCTOR_REVISION_REQUESTED: RevisionTarget.STUDENT,
    FormState.ADMIN_REVISION_REQUESTED_FOR_STUDENT: RevisionTarget.STUDENT,
    FormState.ADMIN_REVISION_REQUESTED_FOR_INSTRUCTOR: RevisionTarget.INSTRUCTOR,
    FormState.MANAGER_REVISION_REQUESTED_FOR_STUDENT: RevisionTarget.STUDENT,
    FormState.MANAGER_REVISION_REQUESTED_FOR_INSTRUCTOR: RevisionTarget.INSTRUCTOR,
    FormState.MANAGER_REVISION_REQUESTED_FOR_ADMIN: RevisionTarget.ADMIN,
}

# States in which the student owner may edit title/abstract/instructor
STUDENT_EDITABLE_STATES: frozenset[FormState] = frozenset(
    {FormState.SUBMITTED}
    | {
        state
        for state, target in REVISION_REQUESTED_STATES.items()
        if target is RevisionTarget.STUDENT
    }
)


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class ThesisForm:
    """A student's thesis proposal under review.

    Instances are immutable; the state machine returns a new instance for
    every transition with `version` incremented.

    Attributes:
        id: Form identifier (immutable once created).
        title: Thesis title.
        abstract_text: Thesis abstract.
        student_id: Owning student.
        instructor_id: Assigned instructor (a professor or manager).
        field_id: Academic field of the thesis.
        state: Current lifecycle state.
        rejection_reason: Set iff the state is a rejected state.
        revision_message: Set iff the state is a revision-requested state.
        revision_requested_at: When the most recent revision was requested.
        created_at: Creation timestamp (UTC).
        submitted_at: Most recent (re)submission timestamp.
        instructor_reviewed_at: Most recent instructor review.
        admin_reviewed_at: Most recent admin review.
        manager_reviewed_at: Most recent manager review.
        updated_at: Last modification timestamp.
        suggested_jury_ids: Jury members suggested by the student.
        version: Optimistic concurrency counter.
    """

    id: UUID
    title: str
    abstract_text: str
    student_id: int
    instructor_id: int
    field_id: int
    state: FormState = field(default=FormState.SUBMITTED)
    rejection_reason: str | None = field(default=None)
    revision_message: str | None = field(default=None)
    revision_requested_at: datetime | None = field(default=None)
    created_at: datetime = field(default_factory=_utc_now)
    submitted_at: datetime | None = field(default=None)
    instructor_reviewed_at: datetime | None = field(default=None)
    admin_reviewed_at: datetime | None = field(default=None)
    manager_reviewed_at: datetime | None = field(default=None)
    updated_at: datetime = field(default_factory=_utc_now)
    suggested_jury_ids: tuple[int, ...] = field(default=())
    version: int = field(default=1)

    def __post_init__(self) -> None:
        """Validate state-dependent field invariants."""
        if self.state.is_rejected() != (self.rejection_reason is not None):
            raise ValueError(
                f"rejection_reason must be set iff state is rejected "
                f"(state={self.state.value})"
            )
        if self.state.is_revision_requested() != (self.revision_message is not None):
            raise ValueError(
                f"revision_message must be set iff a revision is requested "
                f"(state={self.state.value})"
            )
        if self.version < 1:
            raise ValueError(f"version must be positive, got {self.version}")

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal()

    def evolve(self, **changes: Any) -> ThesisForm:
        """Return a copy with `changes` applied and the version bumped.

        Used only by the form state machine; presentation code never
        assigns fields directly.
        """
        return replace(self, version=self.version + 1, **changes)
