"""Workflow notifier port.

Delivers NotifyParticipants side effects. Delivery channels (email, SMS,
in-app) live outside the core; this port only hands the notice over.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.transition import NotifyParticipants


class WorkflowNotifierProtocol(Protocol):
    """Protocol for handing workflow notices to the delivery layer."""

    async def notify(self, notice: NotifyParticipants) -> None:
        """Hand over one notice.

        Implementations should not raise for delivery problems they can
        retry themselves; a raised exception is reported but does not undo
        the transition that produced the notice.
        """
        ...
