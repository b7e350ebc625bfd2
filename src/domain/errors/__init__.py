"""Domain errors for the thesis defense workflow.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from DefenseWorkflowError.
"""

from src.domain.errors.authorization import NotAuthorizedError
from src.domain.errors.collaborator import (
    CollaboratorError,
    FormNotFoundError,
    MeetingNotFoundError,
)
from src.domain.errors.concurrent_modification import ConcurrentModificationError
from src.domain.errors.meeting import AlreadyScoredError, InvalidTimeSlotError
from src.domain.errors.state_transition import (
    AlreadyTerminalError,
    InvalidTransitionError,
)
from src.domain.errors.validation import ValidationError

__all__: list[str] = [
    "AlreadyScoredError",
    "AlreadyTerminalError",
    "CollaboratorError",
    "ConcurrentModificationError",
    "FormNotFoundError",
    "InvalidTimeSlotError",
    "InvalidTransitionError",
    "MeetingNotFoundError",
    "NotAuthorizedError",
    "ValidationError",
]
