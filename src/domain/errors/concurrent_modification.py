"""Concurrent modification error for optimistic version checks.

Every form and meeting carries a version counter. Repositories accept the
version the caller read and refuse the write when the stored version has
moved on, so two simultaneous transitions on one entity are serialized.
"""

from __future__ import annotations

from src.domain.exceptions import DefenseWorkflowError


class ConcurrentModificationError(DefenseWorkflowError):
    """Raised when a compare-and-swap write fails on a stale version.

    This is a recoverable error - the caller should re-read the entity
    and decide whether to retry the action against fresh state.

    Attributes:
        entity_type: "thesis_form" or "meeting".
        entity_id: Identifier of the entity being written.
        expected_version: The version the caller based its write on.
        actual_version: The version currently stored (None if missing).
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: object,
        expected_version: int | None,
        actual_version: int | None = None,
    ) -> None:
        """Initialize concurrent modification error.

        Args:
            entity_type: Kind of entity being written.
            entity_id: Identifier of the entity.
            expected_version: Version the caller expected to be current.
            actual_version: Version found in storage.
        """
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrent modification detected for {entity_type} {entity_id}. "
            f"Expected version: {expected_version}, found: {actual_version}. "
            "Another process has modified this entity."
        )
