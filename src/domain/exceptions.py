"""Base exception classes for the thesis defense domain layer."""


class DefenseWorkflowError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    This enables consistent error handling across the application:
    callers can catch DefenseWorkflowError to separate workflow
    rejections from unexpected failures.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
