"""Workflow notifier stub implementation.

Records every notice handed over so tests can assert on who was told
what. Nothing is delivered.
"""

from __future__ import annotations

from uuid import UUID

from structlog import get_logger

from src.application.ports.workflow_notifier import WorkflowNotifierProtocol
from src.domain.models.transition import NotificationEvent, NotifyParticipants

logger = get_logger(__name__)


class WorkflowNotifierStub(WorkflowNotifierProtocol):
    """In-memory stub implementation of WorkflowNotifierProtocol.

    Attributes:
        sent: Notices in the order they were handed over.
    """

    def __init__(self) -> None:
        self.sent: list[NotifyParticipants] = []

    async def notify(self, notice: NotifyParticipants) -> None:
        self.sent.append(notice)
        logger.debug(
            "notice_recorded",
            notification_event=notice.event.value,
            entity_id=str(notice.entity_id),
            recipient_ids=list(notice.recipient_ids),
        )

    # Test helpers

    def events_for(self, entity_id: UUID) -> list[NotificationEvent]:
        return [notice.event for notice in self.sent if notice.entity_id == entity_id]

    def sent_to(self, user_id: int) -> list[NotifyParticipants]:
        """Notices naming `user_id` as an individual recipient."""
        return [notice for notice in self.sent if user_id in notice.recipient_ids]

    def clear(self) -> None:
        self.sent.clear()
