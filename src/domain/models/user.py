"""User identity types shared by both state machines.

Actors are passed explicitly into every transition; the core never reads
an ambient session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """Role of an authenticated user.

    A MANAGER is a professor with elevated review authority (final
    approval tier, jury assignment, meeting scheduling). Both PROFESSOR
    and MANAGER may act as a form's instructor.
    """

    ADMIN = "ADMIN"
    PROFESSOR = "PROFESSOR"
    MANAGER = "MANAGER"
    STUDENT = "STUDENT"

    def is_professor(self) -> bool:
        """Check whether this role belongs to teaching staff."""
        return self in (Role.PROFESSOR, Role.MANAGER)


@dataclass(frozen=True, eq=True)
class SimpleUser:
    """Minimal user projection used for jury rosters.

    Attributes:
        id: User identifier.
        first_name: Given name.
        last_name: Family name.
    """

    id: int
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True, eq=True)
class Actor:
    """The user performing an action.

    Attributes:
        id: User identifier.
        role: The user's role at the time of the action.
    """

    id: int
    role: Role
