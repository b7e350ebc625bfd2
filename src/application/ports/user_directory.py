"""User directory port.

Resolves roles and professor rosters for the workflow services. The
directory is owned by the account-management system; the core only reads.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.user import Role, SimpleUser


class UserDirectoryProtocol(Protocol):
    """Protocol for user lookups.

    Methods:
        get_role: Role of a user, or None if unknown
        is_instructor_of: Whether a user is the assigned instructor of a form
        list_professors: Every professor (including managers)
    """

    async def get_role(self, user_id: int) -> Role | None:
        """Get the role of a user.

        Args:
            user_id: The user identifier.

        Returns:
            The user's role, or None if the user does not exist.
        """
        ...

    async def is_instructor_of(self, user_id: int, form_id: UUID) -> bool:
        """Check whether `user_id` is the assigned instructor of `form_id`."""
        ...

    async def list_professors(self) -> list[SimpleUser]:
        """List all professors and managers eligible for jury duty."""
        ...
