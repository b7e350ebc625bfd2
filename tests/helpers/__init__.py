"""Test helpers for the defense workflow test suite."""

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.workflow_factories import (
    ABSTRACT,
    ADMIN,
    INSTRUCTOR,
    MANAGER,
    PROFESSOR_A,
    PROFESSOR_B,
    STUDENT,
    TITLE,
    make_form,
    make_meeting,
    slot,
)

__all__ = [
    "ABSTRACT",
    "ADMIN",
    "FakeTimeAuthority",
    "INSTRUCTOR",
    "MANAGER",
    "PROFESSOR_A",
    "PROFESSOR_B",
    "STUDENT",
    "TITLE",
    "make_form",
    "make_meeting",
    "slot",
]
