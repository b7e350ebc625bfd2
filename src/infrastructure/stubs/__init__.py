"""Stub implementations for development and testing.

These in-memory stubs implement the application ports. They are NOT
suitable for production use.
"""

from src.infrastructure.stubs.meeting_repository_stub import MeetingRepositoryStub
from src.infrastructure.stubs.thesis_form_repository_stub import ThesisFormRepositoryStub
from src.infrastructure.stubs.user_directory_stub import UserDirectoryStub
from src.infrastructure.stubs.workflow_notifier_stub import WorkflowNotifierStub

__all__: list[str] = [
    "MeetingRepositoryStub",
    "ThesisFormRepositoryStub",
    "UserDirectoryStub",
    "WorkflowNotifierStub",
]
