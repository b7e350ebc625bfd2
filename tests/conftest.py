"""
Pytest configuration and shared fixtures for the defense workflow tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async collaborator failures
- Time-dependent tests use FakeTimeAuthority
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

from src.application.services.meeting_service import MeetingService
from src.application.services.thesis_form_service import ThesisFormService
from src.config.defense_config import TEST_DEFENSE_WORKFLOW_CONFIG
from src.domain.models.user import Role
from src.infrastructure.stubs import (
    MeetingRepositoryStub,
    ThesisFormRepositoryStub,
    UserDirectoryStub,
    WorkflowNotifierStub,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.workflow_factories import ROSTER


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """A clock frozen at 2026-03-02T09:00 UTC."""
    return FakeTimeAuthority()


@pytest.fixture
def form_repo() -> ThesisFormRepositoryStub:
    return ThesisFormRepositoryStub()


@pytest.fixture
def meeting_repo() -> MeetingRepositoryStub:
    return MeetingRepositoryStub()


@pytest.fixture
def notifier() -> WorkflowNotifierStub:
    return WorkflowNotifierStub()


@pytest.fixture
def user_directory() -> UserDirectoryStub:
    """Directory holding the standard cast from workflow_factories."""
    directory = UserDirectoryStub()
    directory.add_user(1, Role.STUDENT, "Sam", "Student")
    for user_id, user in ROSTER.items():
        role = Role.MANAGER if user_id == 20 else Role.PROFESSOR
        directory.add_user(user_id, role, user.first_name, user.last_name)
    directory.add_user(30, Role.ADMIN, "Ali", "Admin")
    return directory


@pytest.fixture
def form_service(
    form_repo: ThesisFormRepositoryStub,
    meeting_repo: MeetingRepositoryStub,
    user_directory: UserDirectoryStub,
    notifier: WorkflowNotifierStub,
    fake_time_authority: FakeTimeAuthority,
) -> ThesisFormService:
    return ThesisFormService(
        form_repo=form_repo,
        meeting_repo=meeting_repo,
        user_directory=user_directory,
        notifier=notifier,
        time_authority=fake_time_authority,
        config=TEST_DEFENSE_WORKFLOW_CONFIG,
    )


@pytest.fixture
def meeting_service(
    meeting_repo: MeetingRepositoryStub,
    notifier: WorkflowNotifierStub,
    fake_time_authority: FakeTimeAuthority,
) -> MeetingService:
    return MeetingService(
        meeting_repo=meeting_repo,
        notifier=notifier,
        time_authority=fake_time_authority,
        config=TEST_DEFENSE_WORKFLOW_CONFIG,
    )
