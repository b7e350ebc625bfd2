"""User directory stub implementation.

In-memory users for development and testing. Register users with
`add_user()` before running a workflow.
"""

from __future__ import annotations

from uuid import UUID

from src.application.ports.user_directory import UserDirectoryProtocol
from src.domain.models.user import Role, SimpleUser


class UserDirectoryStub(UserDirectoryProtocol):
    """In-memory stub implementation of UserDirectoryProtocol.

    Instructor assignments are recorded explicitly with `assign_instructor()`
    since the directory does not read thesis forms.
    """

    def __init__(self) -> None:
        self._users: dict[int, tuple[SimpleUser, Role]] = {}
        self._instructors: dict[UUID, int] = {}

    async def get_role(self, user_id: int) -> Role | None:
        entry = self._users.get(user_id)
        return entry[1] if entry is not None else None

    async def is_instructor_of(self, user_id: int, form_id: UUID) -> bool:
        return self._instructors.get(form_id) == user_id

    async def list_professors(self) -> list[SimpleUser]:
        """Professors and managers, ordered by id."""
        return [
            user
            for user, role in sorted(self._users.values(), key=lambda entry: entry[0].id)
            if role.is_professor()
        ]

    # Test helpers

    def add_user(self, user_id: int, role: Role, first_name: str = "", last_name: str = "") -> SimpleUser:
        """Register a user and return its roster projection."""
        user = SimpleUser(
            id=user_id,
            first_name=first_name or f"User{user_id}",
            last_name=last_name or role.value.title(),
        )
        self._users[user_id] = (user, role)
        return user

    def assign_instructor(self, form_id: UUID, user_id: int) -> None:
        self._instructors[form_id] = user_id

    def clear(self) -> None:
        self._users.clear()
        self._instructors.clear()
