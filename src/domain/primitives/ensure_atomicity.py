"""Atomic multi-write primitive with compensating rollback.

Some transitions persist more than one entity: the manager's approval
writes the form and creates its meeting. If a later write fails, the
earlier ones must be undone so no partial transition is left behind.

Usage:
    async with AtomicOperationContext("manager_approval") as ctx:
        await form_repo.save(updated_form, expected_version=3)
        ctx.add_rollback(lambda: form_repo.save(original_form, expected_version=4))
        await meeting_repo.save(meeting, expected_version=None)
        # On exception: the form write is compensated, exception re-raised
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from types import TracebackType

import structlog

log = structlog.get_logger()

# Rollback handlers may be sync or async; async results are awaited
RollbackHandler = Callable[[], object]


class AtomicOperationContext:
    """Async context manager that compensates completed writes on failure.

    Handlers run in reverse registration order (LIFO). A failing handler
    is logged and the remaining handlers still run; the original
    exception is always re-raised.

    Attributes:
        operation: Name of the guarded operation, for logs.
        rolled_back: True once rollback handlers have run.
    """

    def __init__(self, operation: str = "workflow_transition") -> None:
        self.operation = operation
        self.rolled_back = False
        self._handlers: list[RollbackHandler] = []

    def add_rollback(self, handler: RollbackHandler) -> None:
        """Register a compensation for a write that has just succeeded."""
        self._handlers.append(handler)

    async def __aenter__(self) -> AtomicOperationContext:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if exc_val is None:
            return False

        log.warning(
            "atomic_operation_failed",
            operation=self.operation,
            error=str(exc_val),
            error_type=exc_type.__name__ if exc_type else "Unknown",
            rollback_count=len(self._handlers),
        )
        while self._handlers:
            handler = self._handlers.pop()
            try:
                result = handler()
                if inspect.isawaitable(result):
                    await result
            except Exception as rollback_error:
                log.error(
                    "rollback_handler_failed",
                    operation=self.operation,
                    rollback_error=str(rollback_error),
                    rollback_error_type=type(rollback_error).__name__,
                )
        self.rolled_back = True
        return False
